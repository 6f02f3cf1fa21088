"""Entry point for running as module: python -m strike_nwc"""

# Load .env file before importing anything else
from dotenv import load_dotenv
load_dotenv()

from strike_nwc.main import main

if __name__ == "__main__":
    main()
