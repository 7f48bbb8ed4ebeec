"""Launch script for the simulator HTTP API."""

import uvicorn


def main():
    """Start the API server."""
    print("=" * 70)
    print("X-Wing Simulator API")
    print("=" * 70)
    print("\nStarting server...")
    print("POST http://localhost:8000/api/simulate to run a batch")
    print("\nPress Ctrl+C to stop the server")
    print("=" * 70 + "\n")

    uvicorn.run(
        "xwing_sim.api.app:app",
        host="127.0.0.1",
        port=8000,
        reload=False,
        log_level="info"
    )


if __name__ == "__main__":
    main()
