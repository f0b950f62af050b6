import os
import sys

import uvicorn

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

if __name__ == "__main__":
    from main import app
    host = os.environ.get("SCRIMMAGE_HOST", "127.0.0.1")
    port = int(os.environ.get("SCRIMMAGE_PORT", "8000"))
    uvicorn.run(app, host=host, port=port, workers=1)
