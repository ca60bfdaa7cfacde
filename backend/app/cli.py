#!/usr/bin/env python3
"""Terminal client for the lesson API with local progress tracking."""
import argparse
import sys

import requests

from . import config
from .progress import JsonFileStorage, ProgressTracker


class ApiError(Exception):
    pass


def api_get(base_url: str, path: str, timeout: float = 10):
    try:
        response = requests.get(f"{base_url.rstrip('/')}{path}", timeout=timeout)
    except requests.RequestException as exc:
        raise ApiError(f"Cannot reach {base_url}: {exc}") from exc
    try:
        data = response.json()
    except ValueError as exc:
        raise ApiError(f"Unexpected response from {path} ({response.status_code})") from exc
    if response.status_code != 200:
        message = data.get("error") if isinstance(data, dict) else None
        raise ApiError(message or f"Request failed with status {response.status_code}")
    return data


def cmd_list(args, tracker: ProgressTracker) -> int:
    lessons = api_get(args.api_url, "/api/lessons")
    for lesson in lessons:
        mark = "x" if tracker.is_completed(lesson["id"]) else " "
        print(f"[{mark}] {lesson['id']:>4}  {lesson['title']}  ({lesson['track']}, {lesson['difficulty']})")
    if not lessons:
        print("No lessons available.")
    return 0


def cmd_show(args, tracker: ProgressTracker) -> int:
    lesson = api_get(args.api_url, f"/api/lessons/{args.lesson_id}")
    print(f"# {lesson['title']}")
    print(f"Track: {lesson['track']}  Difficulty: {lesson['difficulty']}")
    if tracker.is_completed(lesson["id"]):
        print("Status: completed")
    print()
    print(lesson["body"])
    if args.solution:
        print("\n--- solution ---")
        print(lesson["solution"])
    else:
        print("\n--- starter code ---")
        print(lesson["starterCode"])
    return 0


def cmd_complete(args, tracker: ProgressTracker) -> int:
    tracker.mark_completed(args.lesson_id)
    print(f"Marked lesson {args.lesson_id} as completed.")
    return 0


def cmd_progress(args, tracker: ProgressTracker) -> int:
    total = len(api_get(args.api_url, "/api/lessons"))
    done = tracker.completed
    print(f"Completed {len(done)} of {total} lessons ({tracker.percent(total)}%).")
    return 0


def cmd_serve(args, tracker: ProgressTracker) -> int:
    from .main import run

    run()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lesson-viewer", description="Browse coding lessons.")
    parser.add_argument("--api-url", default=config.LESSON_API_URL, help="Lesson API base URL")
    parser.add_argument(
        "--progress-file", default=config.LESSON_PROGRESS_PATH, help="Where completed lessons are stored"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("list", help="List lessons").set_defaults(func=cmd_list)

    show = sub.add_parser("show", help="Show one lesson")
    show.add_argument("lesson_id", help="Lesson id")
    show.add_argument("--solution", action="store_true", help="Print the solution instead of starter code")
    show.set_defaults(func=cmd_show)

    complete = sub.add_parser("complete", help="Mark a lesson as completed")
    complete.add_argument("lesson_id", type=int, help="Lesson id")
    complete.set_defaults(func=cmd_complete)

    sub.add_parser("progress", help="Show completion percentage").set_defaults(func=cmd_progress)
    sub.add_parser("serve", help="Run the lesson API").set_defaults(func=cmd_serve)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    tracker = ProgressTracker(JsonFileStorage(args.progress_file))
    try:
        return args.func(args, tracker)
    except ApiError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
