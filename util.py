import os
import sys
import socket
import subprocess
import traceback
import webbrowser

import panel as pn

try:
    import webview
except ImportError:
    webview = None


#
# tracing; set HIDER_TRACE=1 to see what the bars are doing
#

def tracing():
    return os.getenv("HIDER_TRACE", "") not in ("", "0")

def trace(*args):
    if tracing():
        print("hider:", *args, file=sys.stderr)


def report_error(where, file=None):
    """
    Print the exception being handled, innermost frame first, so the
    failing line of a browser callback is at the top of the server log.
    """
    file = file or sys.stderr
    etype, value, tb = sys.exc_info()
    if etype is None:
        return
    print(f"hider: error in {where}, innermost frame first:", file=file)
    frames = traceback.extract_tb(tb)
    frames.reverse()
    file.write("".join(traceback.format_list(frames)))
    file.write("".join(traceback.format_exception_only(etype, value)))


#
# serving
#

def open_url(url, title, browser=None, width=420, height=800):
    """
    Open url in a pywebview window (the default when pywebview is
    installed; blocks until the window closes), in the system browser
    ("webbrowser"), or in the named app via "open -a". Returns which
    of those was used.
    """
    browser = browser or os.getenv("HIDER_BROWSER", "webview")
    if browser == "webview" and webview is None:
        browser = "webbrowser"

    if browser == "webview":
        # phone-ish window so there is something to scroll
        webview.create_window(title, url, width=width, height=height)
        webview.start()
    elif browser == "webbrowser":
        webbrowser.open_new(url)
    else:
        subprocess.run(["open", "-a", browser, url], check=False)
    return browser


def free_port():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("localhost", 0))
        return s.getsockname()[1]


def show(app, title, browser=None, port=None):
    """Serve app and open it; returns when the webview window closes, or runs until interrupted."""
    port = port or free_port()
    server = pn.serve(app, port=port, address="localhost", threaded=True, show=False, title=title)
    try:
        if open_url(f"http://localhost:{port}", title, browser) != "webview":
            server.join()
    finally:
        server.stop()
