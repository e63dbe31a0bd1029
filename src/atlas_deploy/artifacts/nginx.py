"""
Renderizador da configuração do proxy reverso (nginx).

Decisões arquiteturais:
- Renderização por lista de linhas com indentação explícita
- Cada trecho condicional é uma variante (compressão, HSTS, listener)
  resolvida antes da renderização
- O bloco de compressão é omitido por completo quando gzip está desligado

Limites explícitos:
- Não valida a existência dos caminhos de certificado (papel do validador)
- Não lê ambiente nem relógio
"""

from __future__ import annotations

from typing import List

from atlas_deploy.core.config.schema import ConfigTree

from .model import (
    API_TIMEOUTS,
    DEFAULT_TIMEOUTS,
    Compression,
    GzipCompression,
    Hsts,
    HstsHeader,
    Listener,
    NoCompression,
    NoHsts,
    PlainHttp,
    ProxyTimeouts,
    RateLimitZone,
    TlsTermination,
    compression_for,
    hsts_for,
    listener_for,
    rate_limit_zone_for,
)


UPSTREAM = "app_backend"
UPSTREAM_SERVER = "app:3000"

SSL_CIPHERS = (
    "ECDHE-RSA-AES128-GCM-SHA256:ECDHE-RSA-AES256-GCM-SHA384:"
    "ECDHE-RSA-AES128-SHA256:ECDHE-RSA-AES256-SHA384"
)

SECURITY_HEADERS = (
    "add_header X-Frame-Options DENY always;",
    "add_header X-Content-Type-Options nosniff always;",
    'add_header X-XSS-Protection "1; mode=block" always;',
    'add_header Referrer-Policy "strict-origin-when-cross-origin" always;',
)

_GZIP_TYPES = (
    "text/plain",
    "text/css",
    "text/xml",
    "text/javascript",
    "application/javascript",
    "application/xml+rss",
    "application/json",
    "image/svg+xml",
)


def _indent(lines: List[str], depth: int) -> List[str]:
    pad = "    " * depth
    return [f"{pad}{line}" if line else "" for line in lines]


def _compression_lines(compression: Compression) -> List[str]:
    if isinstance(compression, GzipCompression):
        return [
            "gzip on;",
            "gzip_vary on;",
            "gzip_min_length 1024;",
            f"gzip_comp_level {compression.level};",
            "gzip_types " + " ".join(_GZIP_TYPES) + ";",
            "",
        ]
    if isinstance(compression, NoCompression):
        return []
    raise TypeError(f"unknown compression variant: {compression!r}")


def _hsts_lines(hsts: Hsts) -> List[str]:
    if isinstance(hsts, HstsHeader):
        return [
            f'add_header Strict-Transport-Security "max-age={hsts.max_age}; '
            'includeSubDomains; preload" always;'
        ]
    if isinstance(hsts, NoHsts):
        return []
    raise TypeError(f"unknown hsts variant: {hsts!r}")


def _timeout_lines(timeouts: ProxyTimeouts) -> List[str]:
    return [
        f"proxy_connect_timeout {timeouts.connect};",
        f"proxy_send_timeout {timeouts.send};",
        f"proxy_read_timeout {timeouts.read};",
    ]


def _proxy_header_lines() -> List[str]:
    return [
        "proxy_set_header Host $host;",
        "proxy_set_header X-Real-IP $remote_addr;",
        "proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;",
        "proxy_set_header X-Forwarded-Proto $scheme;",
    ]


def _locations(zone: RateLimitZone) -> List[str]:
    lines: List[str] = []

    lines.append("location /health {")
    lines.extend(_indent([f"proxy_pass http://{UPSTREAM}/health;", "access_log off;"], 1))
    lines.append("}")
    lines.append("")

    lines.append("location /api/ {")
    lines.extend(
        _indent(
            [f"limit_req zone={zone.name} burst=20 nodelay;", f"proxy_pass http://{UPSTREAM};"]
            + _proxy_header_lines()
            + _timeout_lines(API_TIMEOUTS),
            1,
        )
    )
    lines.append("}")
    lines.append("")

    # assets estáticos: sem timeouts explícitos, apenas cabeçalhos de cache
    lines.append(r"location ~* \.(js|css|png|jpg|jpeg|gif|ico|svg|woff|woff2|ttf|eot)$ {")
    lines.extend(
        _indent(
            [
                f"proxy_pass http://{UPSTREAM};",
                "proxy_set_header Host $host;",
                "expires 1y;",
                'add_header Cache-Control "public, immutable";',
                "access_log off;",
            ],
            1,
        )
    )
    lines.append("}")
    lines.append("")

    lines.append("location / {")
    lines.extend(
        _indent(
            [f"proxy_pass http://{UPSTREAM};"]
            + _proxy_header_lines()
            + [
                "proxy_http_version 1.1;",
                "proxy_set_header Upgrade $http_upgrade;",
                'proxy_set_header Connection "upgrade";',
            ]
            + _timeout_lines(DEFAULT_TIMEOUTS),
            1,
        )
    )
    lines.append("}")
    return lines


def _server_blocks(listener: Listener, domain: str, zone: RateLimitZone) -> List[str]:
    if isinstance(listener, TlsTermination):
        redirect = [
            "server {",
            *_indent(
                [
                    "listen 80;",
                    f"server_name {domain};",
                    "return 301 https://$server_name$request_uri;",
                ],
                1,
            ),
            "}",
            "",
        ]
        secure = [
            "server {",
            *_indent(
                [
                    "listen 443 ssl http2;",
                    f"server_name {domain};",
                    "",
                    f"ssl_certificate {listener.certificate_path};",
                    f"ssl_certificate_key {listener.key_path};",
                    "ssl_protocols TLSv1.2 TLSv1.3;",
                    f"ssl_ciphers {SSL_CIPHERS};",
                    "ssl_prefer_server_ciphers off;",
                    "ssl_session_cache shared:SSL:10m;",
                    "ssl_session_timeout 10m;",
                    "",
                ]
                + _locations(zone),
                1,
            ),
            "}",
        ]
        return redirect + secure
    if isinstance(listener, PlainHttp):
        return [
            "server {",
            *_indent(["listen 80;", f"server_name {domain};", ""] + _locations(zone), 1),
            "}",
        ]
    raise TypeError(f"unknown listener variant: {listener!r}")


def render_nginx_config(config: ConfigTree) -> str:
    """Renderiza `nginx.conf` completo a partir da árvore de configuração."""
    ssl = config.security.ssl
    zone = rate_limit_zone_for(config.security.firewall.rate_limiting)

    http: List[str] = [
        "include /etc/nginx/mime.types;",
        "default_type application/octet-stream;",
        "",
        "log_format main '$remote_addr - $remote_user [$time_local] \"$request\" '",
        "                '$status $body_bytes_sent \"$http_referer\" '",
        "                '\"$http_user_agent\" \"$http_x_forwarded_for\"';",
        "access_log /var/log/nginx/access.log main;",
        "error_log /var/log/nginx/error.log warn;",
        "",
        "sendfile on;",
        "tcp_nopush on;",
        "tcp_nodelay on;",
        "keepalive_timeout 65;",
        "types_hash_max_size 2048;",
        "",
    ]
    http.extend(_compression_lines(compression_for(config.performance.compression)))
    http.extend(
        [
            f"limit_req_zone $binary_remote_addr zone={zone.name}:{zone.size} "
            f"rate={zone.requests_per_minute}r/m;",
            "",
        ]
        + list(SECURITY_HEADERS)
    )
    http.extend(_hsts_lines(hsts_for(ssl)))
    http.extend(
        [
            "",
            f"upstream {UPSTREAM} {{",
            *_indent([f"server {UPSTREAM_SERVER} max_fails=3 fail_timeout=30s;", "keepalive 32;"], 1),
            "}",
            "",
        ]
    )
    http.extend(_server_blocks(listener_for(ssl), config.environment.domain, zone))

    lines: List[str] = [
        "events {",
        *_indent(["worker_connections 1024;"], 1),
        "}",
        "",
        "http {",
        *_indent(http, 1),
        "}",
    ]
    return "\n".join(lines) + "\n"
