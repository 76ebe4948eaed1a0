import argparse

import uvicorn


def build_parser():
    parser = argparse.ArgumentParser(description="Run the CuraLink assistant proxy")
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    parser.add_argument("--port", type=int, default=8081, help="Port to listen on")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    return parser


def main(args=None):
    if args is None:
        args = build_parser().parse_args()
    uvicorn.run("curalink.api.server:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
