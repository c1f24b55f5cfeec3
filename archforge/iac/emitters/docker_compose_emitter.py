"""Docker Compose emitter for local development stacks.

Produces ``docker-compose.yml``, ``.env.example``, a development
``docker-compose.override.yml`` and, when any service is built from
source, a sample multi-stage ``Dockerfile``.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Set, Tuple

from ...models import GeneratedFile, IaCFormat
from ..context import EmitterContext
from ..mappings.docker_compose import NETWORK
from ..registry import ROLE_VARIABLE, ROLE_VOLUME, Fragment
from ..sanitizer import COMPOSE_RULES, sanitize
from ..serializers.documents import to_dotenv, to_yaml
from . import register_emitter
from .base import FallbackPolicy, IaCEmitter, unmapped_summary

logger = logging.getLogger(__name__)

DOCKERFILE_TEMPLATE = """\
# Dockerfile for {project}
# Generated by archforge

FROM node:20-alpine AS builder

WORKDIR /app

# Install dependencies
COPY package*.json ./
RUN npm ci

# Copy source
COPY . .

# Build
RUN npm run build

# Production image
FROM node:20-alpine AS runner

WORKDIR /app

# Create non-root user
RUN addgroup --system --gid 1001 nodejs
RUN adduser --system --uid 1001 appuser

# Copy built assets
COPY --from=builder --chown=appuser:nodejs /app/dist ./dist
COPY --from=builder --chown=appuser:nodejs /app/node_modules ./node_modules
COPY --from=builder --chown=appuser:nodejs /app/package.json ./

USER appuser

EXPOSE 8080

ENV NODE_ENV=production
ENV PORT=8080

CMD ["node", "dist/index.js"]
"""


class DockerComposeEmitter(IaCEmitter):
    """Emitter for Docker Compose files."""

    FORMAT = IaCFormat.DOCKER_COMPOSE
    IDENTIFIER_RULES = COMPOSE_RULES
    FALLBACK_POLICY = FallbackPolicy.OMIT

    def fragment_key(self, fragment: Fragment) -> Tuple[str, ...]:
        return (fragment.name,)

    def _assemble(self, context: EmitterContext) -> List[GeneratedFile]:
        services, buildable = self.build_services(context)
        files = [
            GeneratedFile(
                filename="docker-compose.yml",
                content=self._compose_file(context, services),
                language="yaml",
            ),
            GeneratedFile(filename=".env.example", content=self._env_example(context), language="bash"),
            GeneratedFile(
                filename="docker-compose.override.yml",
                content=self._override_file(context, buildable),
                language="yaml",
            ),
        ]
        if buildable:
            files.append(
                GeneratedFile(
                    filename="Dockerfile",
                    content=DOCKERFILE_TEMPLATE.format(project=context.config.project_name),
                    language="dockerfile",
                )
            )
        return files

    def build_services(self, context: EmitterContext) -> Tuple[Dict[str, Any], List[str]]:
        """Service definitions keyed by name, plus the names built from source.

        Buildable services depend on every other, non-buildable service;
        the list and the published host ports are computed once all
        services are known.
        """
        services: Dict[str, Any] = {}
        buildable: List[str] = []
        published: Dict[str, Tuple[int, ...]] = {}
        for mapped in context.mapped:
            for fragment in mapped.resources:
                services[fragment.name] = copy.deepcopy(fragment.body)
                if fragment.meta.get("buildable"):
                    buildable.append(fragment.name)
                if fragment.meta.get("publish"):
                    published[fragment.name] = fragment.meta["publish"]

        backing = [name for name in services if name not in buildable]
        for name in buildable:
            depends_on = [other for other in backing if other != name]
            if depends_on:
                services[name]["depends_on"] = depends_on
            else:
                services[name].pop("depends_on", None)
            logger.debug(f"Service '{name}' depends on {depends_on}")

        self._assign_host_ports(services, published)
        return services, buildable

    @staticmethod
    def _assign_host_ports(services: Dict[str, Any], published: Dict[str, Tuple[int, ...]]) -> None:
        """Bind each container port to the first free host port at or above it."""
        taken: Set[int] = set()
        for name, container_ports in published.items():
            mappings = []
            for port in container_ports:
                host = port
                while host in taken:
                    host += 1
                taken.add(host)
                mappings.append(f"{host}:{port}")
            services[name]["ports"] = mappings

    def _compose_file(self, context: EmitterContext, services: Dict[str, Any]) -> str:
        header = self.header_lines(context, "Docker Compose configuration")
        if context.unmapped:
            header.append("")
            header.append("Omitted components (no Docker Compose mapping):")
            header.extend(unmapped_summary(context.unmapped))
        header.extend(
            [
                "",
                "Usage:",
                "  docker compose up -d",
                "  docker compose logs -f",
                "  docker compose down",
            ]
        )

        document: Dict[str, Any] = {"services": services}
        volumes = {f.name: copy.deepcopy(f.body) for f in context.auxiliary_of(ROLE_VOLUME)}
        if volumes:
            document["volumes"] = volumes
        document["networks"] = {NETWORK: {"driver": "bridge"}}
        return to_yaml(document, header="\n".join(header))

    @staticmethod
    def _env_example(context: EmitterContext) -> str:
        config = context.config
        entries: List[Tuple[Optional[str], Any]] = [
            (None, "Environment"),
            ("COMPOSE_PROJECT_NAME", sanitize(config.project_name, COMPOSE_RULES)),
            ("ENVIRONMENT", config.environment.value),
        ]

        sections: Dict[str, List[Fragment]] = {}
        for fragment in context.auxiliary_of(ROLE_VARIABLE):
            sections.setdefault(fragment.meta.get("section", "Other"), []).append(fragment)
        for section, variables in sections.items():
            entries.append((None, section))
            entries.extend((v.name, v.meta.get("example", "")) for v in variables)

        entries.extend(
            [
                (None, "Application"),
                ("NODE_ENV", "production"),
                ("LOG_LEVEL", "info"),
            ]
        )
        header = (
            f"Environment variables for {context.architecture.name}\n"
            "Generated by archforge\n"
            "Copy to .env and update values"
        )
        return to_dotenv(entries, header=header)

    @staticmethod
    def _override_file(context: EmitterContext, buildable: List[str]) -> str:
        services = {
            name: {
                "volumes": [f"./{name}:/app"],
                "environment": ["NODE_ENV=development", "DEBUG=*"],
            }
            for name in buildable
        }
        header = (
            f"Development overrides for {context.architecture.name}\n"
            "Loaded automatically by docker compose up"
        )
        return to_yaml({"services": services}, header=header)


register_emitter(IaCFormat.DOCKER_COMPOSE.value, DockerComposeEmitter)
