from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
from pathlib import Path
from dotenv import load_dotenv


# ---- load .env files (backend/.env then repo .env) ----------------------
CURRENT_FILE = Path(__file__).resolve()
BACKEND_DIR = CURRENT_FILE.parents[1]
REPO_ROOT = CURRENT_FILE.parents[2]

_env_candidates = [
    BACKEND_DIR / ".env.local",
    BACKEND_DIR / ".env",
    REPO_ROOT / ".env.local",
    REPO_ROOT / ".env",
]
_loaded = []
for env_path in _env_candidates:
    if env_path.exists():
        # Do not override already-set env vars; load in priority order
        load_dotenv(env_path, override=False)
        _loaded.append(str(env_path))

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("app.main")

if _loaded:
    logger.info("Loaded env files: %s", ", ".join(_loaded))
else:
    logger.info("No .env file found next to backend/ or repo root.")

# ルーター（.env ロード後にインポート: DATABASE_URL を確定させるため）
from app.core.errors import InventoryError
from app.routers import overflow, products, qr_codes, stock_requests


app = FastAPI(title="Warehouse Stock Desk API")


# ---- CORS (dev-friendly) ----------------------------------------------
_default_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_env = os.getenv("FRONTEND_ORIGINS") or os.getenv("FRONTEND_ORIGIN") or ""
_env_list = [o.strip() for o in _env.split(",") if o and o.strip()]
origins = sorted(set(_default_origins + _env_list))

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],      # Authorization / Content-Type
    max_age=86400,
)


# ---- domain errors -> JSON -----------------------------------------------
@app.exception_handler(InventoryError)
async def inventory_error_handler(request: Request, exc: InventoryError) -> JSONResponse:
    logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, exc.code)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ---- register routers ------------------------------------------------------
app.include_router(products.router)
app.include_router(stock_requests.router)
app.include_router(overflow.router)
app.include_router(qr_codes.router)


# ---- simple health check ---------------------------------------------------
@app.get("/health")
async def health() -> dict[str, str]:
    """コンテナ／プロセス生存確認用エンドポイント"""
    return {"status": "ok"}
