"""Wayfarer CLI entry point.

Provides subcommands for running the web server, seeding the starter world and
creating accounts. Accepts configuration via flags and environment variables,
with .env loading.

Run `python run.py --help` for details.
"""

import argparse
import os
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

__version__ = "0.1.0"


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    Wayfarer Game Server

    Serve the turn API, seed the starter world or create player accounts.
    Configuration can be provided via CLI flags or environment variables. If
    both are present, CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          HOST                 Bind address for the web server (default: 0.0.0.0)
          PORT                 Port for the web server (default: 5000)
          DATABASE_URL         SQLAlchemy database URI (default: sqlite:///instance/wayfarer.db)
          WAYFARER_START_ROOM  Title or id of the room new players start in
          WAYFARER_LOG_LEVEL   debug | info | warn | error (default: info)

        Examples:
          python run.py server --port 8080
          python run.py --env-file .env seed
          python run.py create-user alice s3cret
        """
    )

    parser = argparse.ArgumentParser(
        prog="Wayfarer",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument("--env-file", dest="env_file", help="Path to a .env file to load before processing flags")
    parser.add_argument("--version", action="version", version=f"Wayfarer Server {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    server_parser = subparsers.add_parser("server", help="Run the web server")
    server_parser.add_argument("--host", default=None, help="Host interface to bind (default: env HOST or 0.0.0.0)")
    server_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: env PORT or 5000)")
    server_parser.add_argument("--db", dest="db_uri", default=None, help="SQLAlchemy database URI")
    server_parser.add_argument("--debug", action="store_true", help="Enable the Flask debugger and reloader")

    seed_parser = subparsers.add_parser("seed", help="Create tables, default config and the starter world")
    seed_parser.add_argument("--db", dest="db_uri", default=None, help="SQLAlchemy database URI")

    user_parser = subparsers.add_parser("create-user", help="Create a player account")
    user_parser.add_argument("username")
    user_parser.add_argument("password")
    user_parser.add_argument("--db", dest="db_uri", default=None, help="SQLAlchemy database URI")

    return parser.parse_args(argv)


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file)
    else:
        load_dotenv()

    # DATABASE_URL must be in place before the Flask app is imported
    if getattr(args, "db_uri", None):
        os.environ["DATABASE_URL"] = args.db_uri

    color = sys.stdout.isatty()
    if color:
        _color_init()

    def label(text: str) -> str:
        return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if color else text

    mode = (args.command or "server").lower()

    from wayfarer import app, db
    from wayfarer.logging_utils import log
    from wayfarer.server import _seed_game_config, create_user, seed_content, start_server

    if mode == "seed":
        with app.app_context():
            db.create_all()
            _seed_game_config()
            created = seed_content()
        print(f"{label('[seed]')} {'starter world created' if created else 'content already present'}")
        return 0

    if mode == "create-user":
        with app.app_context():
            db.create_all()
            user = create_user(args.username, args.password)
        print(f"{label('[user]')} {user.username} (id={user.id})")
        return 0

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")
    divider = "=" * 40
    print("\n".join([divider, f"  Wayfarer {__version__}", divider,
                     f"  {label('Host:'):12} {host}", f"  {label('Port:'):12} {port}",
                     f"  {label('Database:'):12} {app.config['SQLALCHEMY_DATABASE_URI']}", divider]))
    log.info(event="listen", host=host, port=port, debug=debug)
    start_server(host=host, port=port, debug=debug)
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
