import os

import uvicorn

from agenda.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=os.getenv("API_HOST", "0.0.0.0"), port=int(os.getenv("PORT", "8000")))
