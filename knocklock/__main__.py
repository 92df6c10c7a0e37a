# =======================================================================================
# knocklock/__main__.py - `python -m knocklock`
# =======================================================================================
import uvicorn
from .config import config


def main() -> None:
    uvicorn.run("knocklock.main:app", host=config.API_HOST, port=config.API_PORT)


if __name__ == "__main__":
    main()
