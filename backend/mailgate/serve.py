"""
Console entry point: run the API under uvicorn.

    mailgate-api            # HOST=0.0.0.0, HOST_PORT=8000
"""

import os

import uvicorn


def main() -> None:
    uvicorn.run(
        "mailgate.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("HOST_PORT", "8000")),
        reload=os.getenv("RELOAD", "").lower() in ("1", "true"),
    )


if __name__ == "__main__":
    main()
