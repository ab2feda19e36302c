import argparse
import json
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from matcher.database import SessionLocal
from matcher.errors import InsufficientParticipants, MatcherError
from matcher.main import configure_logging, init_db
from matcher.services.rounds import RoundController


def main() -> int:
    parser = argparse.ArgumentParser(description="Trigger one matching round")
    parser.add_argument("--matching-timeout", type=float, default=None)
    args = parser.parse_args()

    configure_logging()
    init_db()
    options = {}
    if args.matching_timeout is not None:
        options["matching_timeout"] = args.matching_timeout
    controller = RoundController(SessionLocal, **options)

    try:
        result = controller.trigger()
    except InsufficientParticipants as exc:
        print(str(exc))
        return 1
    except MatcherError as exc:
        print(f"Round failed: {exc}", file=sys.stderr)
        return 2

    print(json.dumps(result.as_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
