import sys

from fpm_supervisor.main import main

if __name__ == "__main__":
    sys.exit(main())
