"""Start script for the reports API"""
import uvicorn
import sys
import os

if __name__ == "__main__":
    # Run from the backend directory
    base_dir = os.path.dirname(os.path.abspath(__file__))
    os.chdir(base_dir)

    if base_dir not in sys.path:
        sys.path.insert(0, base_dir)

    from foodledger.config import config

    print(f"Starting server in: {base_dir}")
    print(f"Server will start at: http://{config.APP_HOST}:{config.APP_PORT}")
    print("Press Ctrl+C to stop the server")
    print("-" * 50)

    uvicorn.run(
        "foodledger.main:app",
        host=config.APP_HOST,
        port=config.APP_PORT,
        reload=True,
        log_level="info"
    )
