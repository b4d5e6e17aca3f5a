"""Package entry point for ``python -m vocab_marquee``.

``python -m vocab_marquee --gui`` opens the window; any other flags run
the CLI (see cli.py).
"""

import sys

if __name__ == "__main__":
    if sys.argv[1:] == ["--gui"]:
        from vocab_marquee.gui import main as gui_main
        gui_main()
    else:
        from vocab_marquee.cli import main
        main()
