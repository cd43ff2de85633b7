"""Entry point for ``python -m legal_compliance``"""

from legal_compliance.cli.main import run

if __name__ == "__main__":
    run()
