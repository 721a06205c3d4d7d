"""Entrypoint to run the outfit stylist locally.

``python main.py serve`` starts the HTTP API; ``python main.py chat`` runs a
small terminal session against a fixed starting outfit.
"""

from __future__ import annotations

import argparse
import json

from stylist_app.app import OutfitStylistApp

DEMO_OUTFIT = [
    {"name": "White T-shirt", "category": "top"},
    {"name": "Blue jeans", "category": "bottom"},
    {"name": "White sneakers", "category": "footwear"},
]


def chat(conversation_id: str = "local-demo") -> None:
    app = OutfitStylistApp()
    current = list(DEMO_OUTFIT)
    print(f"Wearing: {', '.join(item['name'] for item in current)}")
    try:
        while True:
            message = input("> ").strip()
            if not message:
                continue
            if message.lower() in {"quit", "exit"}:
                break
            response = app.handle_turn(conversation_id, {"message": message, "current_items": current})
            print(response.get("response_text") or json.dumps(response, indent=2))
            if response.get("status") == "ok":
                current = response["items_to_apply"]
    except (EOFError, KeyboardInterrupt):
        print()
    finally:
        app.close()


def main() -> None:
    parser = argparse.ArgumentParser(description="Outfit stylist")
    parser.add_argument("command", choices=["serve", "chat"], nargs="?", default="chat")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8080)
    args = parser.parse_args()

    if args.command == "serve":
        import uvicorn

        uvicorn.run("server.api:app", host=args.host, port=args.port, reload=False)
    else:
        chat()


if __name__ == "__main__":
    main()
