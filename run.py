# run.py
import os
import uvicorn
from dotenv import load_dotenv

load_dotenv(override=True)


def run_server(port: int, reload: bool = True):
    """Start uvicorn, retrying without reload if the watcher lacks permission."""
    try:
        uvicorn.run("weekly_report.api:app", host="0.0.0.0", port=port, reload=reload)
    except (PermissionError, OSError) as exc:
        err_no = getattr(exc, "errno", None)
        if reload and err_no == 1:
            print("ℹ️  Reload watcher not permitted; restarting server without reload.")
            uvicorn.run("weekly_report.api:app", host="0.0.0.0", port=port, reload=False)
        else:
            raise


if __name__ == "__main__":
    server_port = int(os.getenv("PORT") or 8000)
    reload_pref = os.getenv("UVICORN_RELOAD", "true").strip().lower() not in {"0", "false", "no"}
    print(f"📌 Point Twilio 'When a message comes in' (POST) at <public url>/webhooks/twilio (port {server_port})")
    run_server(server_port, reload=reload_pref)
