from . web_server import WebServer, run_until_disconnected, ClientDisconnected
