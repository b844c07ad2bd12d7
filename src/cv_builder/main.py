
# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Main entry point for the CV Builder CLI.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from cv_builder.config import Settings, set_ca_bundle_override
from cv_builder.errors import CVBuilderError, SchemaError
from cv_builder.export import render_cv, render_letter
from cv_builder.gateway import Action, build_gateway
from cv_builder.ingest import read_url

logger = logging.getLogger(__name__)


def setup_logging(verbosity: int, quiet: bool = False, log_dir: str = "user_content/logs"):
    """
    Configures logging:
    - File: <log_dir>/cv_builder.log (DEBUG)
    - Console: Default=WARNING, -q=ERROR, -v=INFO, -vv+=DEBUG
    """
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    file_handler = logging.FileHandler(log_path / "cv_builder.log")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    root.addHandler(file_handler)

    if quiet:
        level = logging.ERROR
    elif verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    console_handler = RichHandler(console=Console(stderr=True), show_path=False)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)

    # Silence noisy libs unless in super debug
    if verbosity < 3:
        for name in ("httpx", "httpcore", "urllib3", "google_genai"):
            logging.getLogger(name).setLevel(logging.WARNING)


def _load_json(path: str, what: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read {what} from {path}: {e}")
        sys.exit(1)


def _serve(args, settings: Settings):
    import uvicorn

    from cv_builder.server import create_app

    logger.info(f"Serving CV Builder AI gateway on http://{args.host}:{args.port}")
    uvicorn.run(create_app(settings), host=args.host, port=args.port, log_config=None)


def _run(args, settings: Settings):
    payload = _load_json(args.payload, "payload")
    config = _load_json(args.config, "AI config") if args.config else None

    if args.jd_url:
        if not isinstance(payload, dict):
            logger.error("--jd-url needs a JSON object payload")
            sys.exit(1)
        try:
            job_text = read_url(args.jd_url)
        except CVBuilderError as e:
            logger.error(e.message)
            sys.exit(1)
        key = "jobPosition" if args.action == Action.MOTIVATION_LETTER.value else "jobDescription"
        payload[key] = job_text
        logger.info(f"Injected {len(job_text)} characters of job post as {key}")

    gateway = build_gateway(settings)
    envelope = gateway.handle(args.action, payload, config)

    print(json.dumps(envelope.body, indent=2, ensure_ascii=False))
    if not envelope.ok:
        logger.error(f"{args.action} answered {envelope.status}: {envelope.body.get('error')}")
        sys.exit(1)


def _export(args, settings: Settings):
    cv = _load_json(args.cv, "CV")
    photo = None
    if args.photo:
        try:
            photo = Path(args.photo).read_bytes()
        except OSError as e:
            logger.error(f"Could not read photo {args.photo}: {e}")
            sys.exit(1)

    letter = None
    if args.letter:
        try:
            letter = Path(args.letter).read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Could not read letter {args.letter}: {e}")
            sys.exit(1)

    try:
        content = render_letter(cv, letter) if letter else render_cv(cv, photo)
    except SchemaError as e:
        logger.error(f"Invalid CV data: {e.message}")
        sys.exit(1)

    output = Path(args.output)
    if output.parent and not output.parent.exists():
        output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(content)
    logger.info(f"{'Letter' if letter else 'CV'} written to {output}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AI assisted CV builder")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase output verbosity (-v=INFO, -vv=DEBUG)")
    parser.add_argument("-q", "--quiet", action="store_true", help="Suppress status output (ERROR only)")
    parser.add_argument("--ca-bundle", help="Path to a custom CA certificate bundle for HTTPS verification (proxy environments)")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP gateway")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    run = sub.add_parser("run", help="Run one AI action in-process and print the response")
    run.add_argument("action", choices=[a.value for a in Action])
    run.add_argument("--payload", required=True, help="JSON file with the action payload")
    run.add_argument("--config", help="JSON file with an AI config ({provider, apiKey, model})")
    run.add_argument("--jd-url", help="Fetch a job post and use it as the job description / position")

    export = sub.add_parser("export", help="Render a CV JSON file to DOCX")
    export.add_argument("cv", help="CV JSON file")
    export.add_argument("--output", required=True, help="Output .docx path")
    export.add_argument("--photo", help="Optional profile photo")
    export.add_argument("--letter", help="Render this motivation letter text file instead of the CV")
    return parser


def _main_cli(argv=None):
    args = build_parser().parse_args(argv)

    if args.ca_bundle:
        set_ca_bundle_override(args.ca_bundle)

    settings = Settings.from_env()
    setup_logging(args.verbose, args.quiet, settings.log_dir)
    logger.debug(f"--- CV Builder: {args.command} ---")

    commands = {"serve": _serve, "run": _run, "export": _export}
    commands[args.command](args, settings)


def main(argv=None):
    try:
        _main_cli(argv)
    except KeyboardInterrupt:
        # stderr so it is seen even when stdout is redirected
        sys.stderr.write("\n\033[31m[-] Cancelled by user\033[0m\n")
        sys.exit(130)


if __name__ == "__main__":
    main()
