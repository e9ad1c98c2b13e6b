"""Run the API with uvicorn: python -m marketing_ledger"""

import os

import uvicorn

from marketing_ledger.log import configure_logging


def main() -> None:
    configure_logging()
    uvicorn.run(
        "marketing_ledger.main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        port=int(os.environ.get("PORT", "8000")),
        log_config=None,
    )


if __name__ == "__main__":
    main()
