"""mvnresolve - resolve Maven artifacts and their transitive dependencies.

    Returns:
        int: Exit code
"""
import json
import logging
import sys
from typing import Any, Dict, List

from args import parse_args
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from constants import ExitCodes
from maven.errors import MavenResolutionError, TransportError
from maven.models import JavaJarDependency, MavenId
from resolver_config import apply_cli_overrides, build_resolver, load_config

logger = logging.getLogger(__name__)


def _setup_logging(args: Any) -> None:
    """Configure logging from --loglevel and --logfile."""
    configure_logging(level=getattr(args, "LOG_LEVEL", None))
    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def dependency_to_dict(dep: JavaJarDependency) -> Dict[str, Any]:
    return {
        "id": str(dep.maven_id),
        "groupId": dep.maven_id.group_id,
        "artifactId": dep.maven_id.artifact_id,
        "version": dep.maven_id.version,
        "jar": str(dep.jar),
        "sources": str(dep.sources) if dep.sources else None,
        "annotations": str(dep.annotations) if dep.annotations else None,
        "scope": dep.scope.value,
    }


def export_json(dependencies: List[JavaJarDependency], path: str) -> None:
    """Exports the resolved dependencies to a JSON file.

    Args:
        dependencies (list): Resolved jar dependencies.
        path (str): File path to export the JSON.
    """
    data = [dependency_to_dict(d) for d in dependencies]
    try:
        with open(path, "w", encoding="utf-8") as file:
            json.dump(data, file, indent=2)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def run(args: Any) -> int:
    """Resolve the requested coordinates; returns the process exit code."""
    try:
        roots = [MavenId.parse(c) for c in args.coordinates]
        config = apply_cli_overrides(load_config(getattr(args, "CONFIG", None)), args)
        resolver = build_resolver(config)
    except ValueError as e:
        logging.error("%s", e)
        return ExitCodes.FILE_ERROR.value

    if is_debug_enabled(logger):
        logger.debug(
            "Resolver configured",
            extra=extra_context(
                event="function_entry", component="cli", action="run",
                repositories=len(config.repositories), cache_dir=str(config.cache_dir),
            )
        )

    results: Dict[MavenId, JavaJarDependency] = {}
    try:
        for root in roots:
            if getattr(args, "DIRECT", False):
                dep = resolver.get_jar_depend(root)
                if dep is None:
                    logging.error("Artifact %s could not be resolved", root)
                    return ExitCodes.NOT_FOUND.value
                results[root] = dep
            else:
                for dep in resolver.get_transitive_dependencies(root):
                    results.setdefault(dep.maven_id, dep)
    except TransportError as e:
        logging.error("Repository unreachable: %s", e)
        return ExitCodes.CONNECTION_ERROR.value
    except MavenResolutionError as e:
        logging.error("Resolution failed: %s", e)
        return ExitCodes.RESOLUTION_ERROR.value

    dependencies = sorted(results.values(), key=lambda d: str(d.maven_id))
    if getattr(args, "OUTPUT", None):
        export_json(dependencies, args.OUTPUT)
    else:
        for dep in dependencies:
            print(dep.jar)
    return ExitCodes.SUCCESS.value


def main() -> None:
    """Main function of the program."""
    args = parse_args()
    _setup_logging(args)
    logging.info("Arguments parsed.")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
