"""
ff init - Create the lifecycle directories.
ff list - Show records per stage.
"""

from featureflow.lib.config import ProjectConfig
from featureflow.lib.constants import EXIT_ALLOW
from featureflow.lib.types import Stage
from featureflow.store.records import init_store, list_records, store_exists
from featureflow.workflow.resolver import scan_consistency


def cmd_init(args, config: ProjectConfig) -> int:
    """Create ideation/ and the five stage directories (idempotent)."""
    created = init_store(config.docs_dir)
    if not created:
        print(f"{config.docs_dir.name}/ already initialized.")
        return EXIT_ALLOW
    for d in created:
        print(f"Created {config.docs_dir.name}/{d.name}/")
    return EXIT_ALLOW


def cmd_list(args, config: ProjectConfig) -> int:
    """List records grouped by stage."""
    docs_dir = config.docs_dir
    if not store_exists(docs_dir):
        print(f"No feature docs at {docs_dir}. Run 'ff init' first.")
        return EXIT_ALLOW

    for stage in Stage:
        records = list_records(docs_dir, stage)
        if stage is Stage.COMPLETED and not getattr(args, "all", False):
            print(f"{stage.value} ({len(records)})")
            continue
        print(f"{stage.value} ({len(records)})")
        if not records:
            continue
        print("-" * 60)
        for r in records:
            title = r.display_title
            title = title[:40] + "..." if len(title) > 40 else title
            print(f"  {r.id:<6} {str(r.status):<12} {title}")
        print()

    violations = scan_consistency(docs_dir)
    if violations:
        print(f"[WARN] {len(violations)} inconsistent record(s). Run 'ff check' for details.")
    return EXIT_ALLOW
