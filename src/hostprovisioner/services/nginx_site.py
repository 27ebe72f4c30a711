"""Rendering of the custom nginx include, server block and sample page."""

import os

INCLUDE_TEMPLATE = """\
# This file loads any custom server blocks placed in {conf_dir}/
# Keep this file for idempotent custom include.
# Do not modify unless you know what you're doing.
include {conf_dir}/*.conf;
"""

SERVER_BLOCK_TEMPLATE = """\
server {{
    listen       80 default_server;
    listen       [::]:80 default_server;
    server_name  _;
    root         {html_dir};
    index        index.html index.htm;

    access_log  /var/log/nginx/custom_access.log;
    error_log   /var/log/nginx/custom_error.log;

    location / {{
        try_files $uri $uri/ =404;
    }}

    # Simple health endpoint
    location = /health {{
        default_type text/plain;
        return 200 'ok';
    }}
}}
"""

INDEX_TEMPLATE = """\
<html>
<head><title>nginx on {label} (custom)</title></head>
<body>
<h1>nginx on {label}</h1>
<p>Served from: {html_dir}</p>
</body>
</html>
"""


class NginxSiteService:
    """Lays out `<custom_dir>/conf.d` and `<custom_dir>/html` and their files."""

    def __init__(self, custom_dir: str):
        self.custom_dir = custom_dir.rstrip("/") or "/"

    @property
    def conf_dir(self) -> str:
        return os.path.join(self.custom_dir, "conf.d")

    @property
    def html_dir(self) -> str:
        return os.path.join(self.custom_dir, "html")

    @property
    def server_block_path(self) -> str:
        return os.path.join(self.conf_dir, "00-default.conf")

    @property
    def index_path(self) -> str:
        return os.path.join(self.html_dir, "index.html")

    def render_include(self) -> str:
        return INCLUDE_TEMPLATE.format(conf_dir=self.conf_dir)

    def render_server_block(self) -> str:
        return SERVER_BLOCK_TEMPLATE.format(html_dir=self.html_dir)

    def render_index(self, label: str) -> str:
        return INDEX_TEMPLATE.format(label=label, html_dir=self.html_dir)
