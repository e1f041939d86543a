import uvicorn
from coursehub_backend.database import get_engine
from coursehub_backend.model import Base
from coursehub_backend.settings import settings

if __name__ == "__main__":

    if settings.DEBUG_MODE != "production":
        Base.metadata.create_all(get_engine())

    uvicorn.run("coursehub_backend.server:app", host="0.0.0.0", port=8000, log_level="debug", reload=True, workers=1)
