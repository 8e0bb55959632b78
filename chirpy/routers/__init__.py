"""
FastAPI routers grouped by domain (auth, chirps).

Each module exposes an APIRouter included by ``chirpy.app.create_app``.
"""
