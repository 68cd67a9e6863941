#!/usr/bin/env python3
"""
Run the Pollution Report backend API.
"""

import os
import sys


def main() -> None:
    # Make src importable
    repo_root = os.path.dirname(__file__)
    sys.path.insert(0, os.path.join(repo_root, "src"))

    from config.settings import get_settings

    settings = get_settings()
    problems = settings.validate_production_security()
    if settings.is_production and problems:
        for problem in problems:
            print(f"CONFIG ERROR: {problem}", file=sys.stderr)
        raise SystemExit(1)

    import uvicorn

    uvicorn.run(
        "web.app:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    main()
