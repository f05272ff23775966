"""
Convenience entrypoint for the realtime voice chat client.

Allows running `python main.py` in addition to `python -m realtime_voice`.
"""

from realtime_voice.cli import main


if __name__ == "__main__":
    main()
