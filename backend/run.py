from ludo_server import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Werkzeug is only used when neither eventlet nor gevent is installed
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], allow_unsafe_werkzeug=True)
