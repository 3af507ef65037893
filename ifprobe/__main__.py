"""Entry point: python -m ifprobe."""

from ifprobe.main import main

if __name__ == "__main__":
    main()
