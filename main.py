"""Simple entrypoint to try the Wardrobe Stylist locally."""

import json
import sys

from stylist_app.app import WardrobeStylistApp


def main() -> None:
    message = " ".join(sys.argv[1:]) or "what should I wear to my interview tomorrow"
    app = WardrobeStylistApp()
    print(json.dumps(app.interpret_message({"message": message}), indent=2))


if __name__ == "__main__":
    main()
