"""Train a response network on a chat export and suggest reply words."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Iterable, TextIO

import yaml

from replynet.core.network import ModelFormatError
from replynet.training import pipelines
from replynet.training.ranking import format_responses

EXPORT_HINT = (
    "To export a chat from WhatsApp, open the chat, tap the three dots in the top right "
    'corner, tap "More", tap "Export chat", and select "Without media".'
)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__, epilog=EXPORT_HINT)
    parser.add_argument("chat_file", nargs="?", type=Path, help="Exported chat (.txt)")
    parser.add_argument("--user", help="Participant whose replies the network learns")
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="chat-default",
        help="Preset configuration to start from",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--epochs", type=int, help="Maximum number of training epochs")
    parser.add_argument("--lr", type=float, help="Learning rate")
    parser.add_argument("--momentum", type=float, help="Momentum coefficient in [0, 1)")
    parser.add_argument("--seed", type=int, help="Seed for the weight initialisation")
    parser.add_argument("--model", type=Path, help="Model file to load or write")
    parser.add_argument(
        "--retrain", action="store_true", help="Train even if the model file already exists"
    )
    parser.add_argument("--top-k", type=int, help="Number of suggested words")
    parser.add_argument("--run-dir", type=Path, help="Directory for run artifacts")
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write a loss.png training curve"
    )
    parser.add_argument("--message", help="Answer a single message instead of prompting")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def resolve_config(args: argparse.Namespace) -> dict:
    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))
    if args.config:
        config = _merge(config, _load_override(args.config))

    data_cfg = config.setdefault("data", {})
    options = data_cfg.setdefault("options", {})
    if args.chat_file is not None:
        data_cfg["name"] = "chat"
        options["path"] = str(args.chat_file)
    if args.user is not None:
        options["user"] = args.user

    model_cfg = config.setdefault("model", {})
    if args.seed is not None:
        model_cfg["seed"] = args.seed

    train_cfg = config.setdefault("train", {})
    overrides = {
        "epochs": args.epochs,
        "lr": args.lr,
        "momentum": args.momentum,
        "top_k": args.top_k,
        "model_path": str(args.model) if args.model else None,
        "run_dir": str(args.run_dir) if args.run_dir else None,
    }
    train_cfg.update({k: v for k, v in overrides.items() if v is not None})
    if args.retrain:
        train_cfg["retrain"] = True
    if args.enable_plots:
        train_cfg["enable_plots"] = True
    return config


def prompt_loop(session: pipelines.ChatSession, stdin: TextIO, stdout: TextIO) -> None:
    while True:
        stdout.write("Enter a message: ")
        stdout.flush()
        line = stdin.readline()
        if not line or not line.strip():
            stdout.write("\n")
            return
        responses = session.respond(line.strip())
        stdout.write(f"Possible responses: {format_responses(responses)}\n")


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)
    data_cfg = config["data"]
    if data_cfg.get("name") == "chat":
        options = data_cfg.get("options", {})
        if not options.get("path"):
            print(f"Usage: {Path(sys.argv[0]).name} <chat file> --user NAME", file=sys.stderr)
            print(EXPORT_HINT)
            raise SystemExit(1)
        if not options.get("user"):
            raise SystemExit("--user is required to pick whose replies are learned")

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    try:
        session = pipelines.build_session(config)
    except FileNotFoundError as exc:
        raise SystemExit(f"Error opening file: {exc.filename}") from None
    except ModelFormatError as exc:
        raise SystemExit(f"{exc}\nRe-run with --retrain to replace the stored model.") from None
    except ValueError as exc:
        raise SystemExit(str(exc)) from None

    if args.message is not None:
        responses = session.respond(args.message)
        print(f"Possible responses: {format_responses(responses)}")
        return
    prompt_loop(session, sys.stdin, sys.stdout)


if __name__ == "__main__":
    main()
