# FastAPI Application Redirect
# Re-exports the app package so uvicorn can be started from the repository root

from app.main import app

# uvicorn main:app --host 0.0.0.0 --port 8001
