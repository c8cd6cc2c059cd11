# Run from project root: uvicorn linerag.main:app --reload

import logging

from fastapi import FastAPI

from linerag.api.handlers import rag_error_handler
from linerag.api.routes import router
from linerag.core.errors import RagError

logging.basicConfig(level=logging.INFO)


app = FastAPI(title="linerag")
app.include_router(router)
app.add_exception_handler(RagError, rag_error_handler)
