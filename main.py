import uvicorn

from docarchive.core.config import HOST, PORT
from docarchive.main import get_application

app = get_application()

if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
