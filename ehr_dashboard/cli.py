"""Console entry point: launches the Streamlit app."""

import os
import sys

from streamlit.web import cli as stcli


def main():
    app = os.path.join(os.path.dirname(os.path.abspath(__file__)), "main.py")
    sys.argv = ["streamlit", "run", app] + sys.argv[1:]
    sys.exit(stcli.main())


if __name__ == "__main__":
    main()
