#!/usr/bin/env python
"""Development server entrypoint for Hisab."""

from hisab import create_app

app = create_app("development")

if __name__ == "__main__":
    app.run(debug=True)
