import sys

from webcrawl_chat.cli.main import main

if __name__ == "__main__":
    sys.exit(main())
