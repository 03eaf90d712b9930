"""
WSGI entry point for PartyRooms.
Used for production deployment with Gunicorn.
"""

import atexit

from app import create_app

app, socketio, container = create_app()
atexit.register(container.shutdown)

if __name__ == "__main__":
    # For development without Gunicorn
    socketio.run(app, host='0.0.0.0', port=8000, debug=True)
else:
    # For production WSGI servers
    application = app
