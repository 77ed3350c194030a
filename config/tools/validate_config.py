# config/tools/validate_config.py

import sys           # for exit codes
from pprint import pprint  # for structured printing

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_config.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from env.loader import ConfigError, load_profile  # import our loader


def main(argv: list[str] | None = None) -> int:
    """Load and print the resolved navigation profile, failing fast on errors."""
    argv = sys.argv[1:] if argv is None else argv
    path = argv[0] if argv else None

    try:
        profile = load_profile(path)
    except (ConfigError, FileNotFoundError) as e:
        print("Config validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        return 1                             # non-zero exit: CI will mark as failed

    print("Config validation OK.")
    print("\nNavigator:")
    pprint(profile.navigator)
    print("\nStuck monitor:")
    pprint(profile.stuck)
    print("\nPlayback:")
    pprint(profile.playback)
    print("\nRecorder:")
    pprint(profile.recorder)
    print("\nMapping:")
    pprint(profile.mapping)
    print("\nPaths:")
    pprint(profile.paths)
    return 0


if __name__ == "__main__":
    sys.exit(main())
