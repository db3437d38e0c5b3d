"""Entry point: python -m src"""
from src.web.app import main

if __name__ == "__main__":
    main()
