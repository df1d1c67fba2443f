import sys

from mbusb.main import main


if __name__ == "__main__":
    sys.exit(main())
