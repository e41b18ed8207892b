import argparse

import panel as pn

import hider
import util

#
# a long page with a toolbar, an extension row and a bottom bar to play with
#

def make_app(args):

    pn.extension()

    toolbar = pn.Row(
        pn.pane.Markdown("**Hider**", margin=(10, 10)),
        pn.widgets.Button(name="Top", button_type="light"),
    )
    extension = pn.Row(
        pn.widgets.RadioButtonGroup(options=["All", "Unread", "Flagged"], value="All"),
        margin=(4, 10),
    )
    bottom = pn.Row(
        *[pn.widgets.Button(name=name, button_type="light") for name in ("Home", "Search", "Profile")],
        styles={"justify-content": "space-around"},
    )
    body = pn.Column(
        *[
            pn.pane.Markdown(f"## Section {i}\n\n" + ("Text\n\n" * 8))
            for i in range(1, args.sections + 1)
        ],
        sizing_mode="stretch_width",
    )

    app = hider.Hider(
        toolbar,
        body,
        extension=extension if args.extension else None,
        bottom=bottom if args.bottom else None,
        contraction_resistance=args.contraction_resistance,
        expansion_resistance=args.expansion_resistance,
        foreground_action=args.foreground,
    )

    toolbar[1].on_click(lambda event: app.scroll_to_top())

    return app


def main():
    parser = argparse.ArgumentParser(description="Scroll-hiding bars demo")
    parser.add_argument("--contraction-resistance", "-c", type=float, default=0.0)
    parser.add_argument("--expansion-resistance", "-e", type=float, default=0.0)
    parser.add_argument("--foreground", choices=["default", "show", "hide"], default="default")
    parser.add_argument("--no-extension", dest="extension", action="store_false")
    parser.add_argument("--no-bottom", dest="bottom", action="store_false")
    parser.add_argument("--sections", type=int, default=24)
    parser.add_argument("--browser", default=None, help="webview, webbrowser, or an app name")
    parser.add_argument("--port", type=int, default=None)
    args = parser.parse_args()

    print("running as local server")
    util.show(lambda: make_app(args), "hider", browser=args.browser, port=args.port)


if __name__ == "__main__":
    main()
