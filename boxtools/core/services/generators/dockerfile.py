"""
Dockerfile generator — a container image with box and every tool in
box.yml preinstalled.

The image is Debian-based; each host package manager can be switched
off with a build arg (``--build-arg INSTALL_CARGO=false``).
"""

from __future__ import annotations

from boxtools.core.models.template import GeneratedFile


_BOX_DOCKERFILE = """\
FROM debian:bookworm-slim

# Package manager feature flags
ARG INSTALL_GO=true
ARG INSTALL_NODE=true
ARG INSTALL_CARGO=true
ARG INSTALL_UV=true
ARG INSTALL_RUBY=true
ARG BOX_PACKAGE=box-tools

# ── System dependencies and selected package managers ──────────
RUN apt-get update && \\
    PACKAGES="curl ca-certificates git build-essential direnv python3 python3-pip" && \\
    if [ "$INSTALL_NODE" = "true" ]; then PACKAGES="$PACKAGES nodejs npm"; fi && \\
    if [ "$INSTALL_RUBY" = "true" ]; then PACKAGES="$PACKAGES ruby-full"; fi && \\
    apt-get install -y --no-install-recommends $PACKAGES && \\
    rm -rf /var/lib/apt/lists/*

RUN if [ "$INSTALL_GO" = "true" ]; then \\
    curl -LsSf https://go.dev/dl/go1.24.0.linux-amd64.tar.gz | tar -C /usr/local -xz; \\
    fi
ENV PATH="/usr/local/go/bin:${PATH}"

RUN if [ "$INSTALL_CARGO" = "true" ]; then \\
    curl -L --proto '=https' --tlsv1.2 -sSf https://raw.githubusercontent.com/cargo-bins/cargo-binstall/main/install.sh | sh && \\
    if [ -f "$HOME/.cargo/bin/cargo-binstall" ]; then mv "$HOME/.cargo/bin/cargo-binstall" /usr/local/bin/; fi; \\
    fi

RUN if [ "$INSTALL_UV" = "true" ]; then \\
    curl -LsSf https://astral.sh/uv/install.sh | UV_INSTALL_DIR=/usr/local/bin sh; \\
    fi

# ── box itself ─────────────────────────────────────────────────
RUN pip install --no-cache-dir --break-system-packages "$BOX_PACKAGE"

# Create non-root user
RUN useradd -m -s /bin/bash box
USER box
WORKDIR /home/box

# ── Project tools ──────────────────────────────────────────────
COPY --chown=box:box box.yml .
ENV CGO_ENABLED=0
RUN box install --non-interactive

ENV PATH="/home/box/.box/bin:${PATH}"

CMD ["/bin/bash"]
"""


def render_dockerfile() -> str:
    return _BOX_DOCKERFILE


def generate_dockerfile(*, output_path: str = "Dockerfile") -> GeneratedFile:
    """Generate the box Dockerfile.

    Args:
        output_path: Relative path for the Dockerfile.
    """
    return GeneratedFile(
        path=output_path,
        content=render_dockerfile(),
        overwrite=True,
        reason="Container image with box tools preinstalled",
    )
