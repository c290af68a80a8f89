import sys
import logging
import argparse
from linksaver import create_app

cli = sys.modules['flask.cli']
cli.show_server_banner = lambda *x: None

app = create_app()

def main() -> None:
    p = argparse.ArgumentParser(prog="linksaver")
    p.add_argument("--host", default="127.0.0.1")
    p.add_argument("--port", type=int, default=8073)
    p.add_argument("--log-level", default=app.config["LOG_LEVEL"])
    args = p.parse_args()

    level = args.log_level.upper()
    logging.basicConfig(level=level)
    app.logger.setLevel(level)
    # request lines only at DEBUG
    logging.getLogger("werkzeug").setLevel(
        logging.INFO if level == "DEBUG" else logging.WARNING
    )

    print(f"LinkSaver starting on http://{args.host}:{args.port}", flush=True)
    app.run(host=args.host, port=args.port, debug=False)

if __name__ == "__main__":
    main()
