from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from jagjar.config import settings
from jagjar.db.database import init_db
from jagjar.errors import register_error_handlers
from jagjar.routes import admin, revenue


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup resources."""
    await init_db()
    yield


app = FastAPI(
    title='JagJar API',
    description='Revenue sharing backend for JagJar developers',
    version='0.1.0',
    lifespan=lifespan,
)

# CORS for the dashboard
app.add_middleware(
    CORSMiddleware,
    allow_origins=['*'],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)

register_error_handlers(app)

# Routes
app.include_router(revenue.router, prefix='/api/revenue', tags=['revenue'])
app.include_router(admin.router, prefix='/api/admin', tags=['admin'])


@app.get('/health')
async def health_check():
    """Health check endpoint."""
    return {'status': 'ok', 'service': 'jagjar-api'}
