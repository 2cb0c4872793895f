"""Loading and linting of product catalogs and region quota documents.

The wizard normally receives products and regions from the cluster API as
decoded objects. This module decodes the same shapes from YAML or JSON
files, for fixtures and for the ``qcw`` developer commands, and checks how
product schemas are authored.

A catalog file holds either or both top-level keys:

```yaml
products:
  - id: 1
    name: Web Stack
    flavors:
      small: {num_vcpus: 2, ram_mb: 4096}
    parameters:
      - {variable: num_web_nodes, default: 2}
regions:
  - id: 1
    name: rdu2
    user_quota: {num_vcpus: 16, ram_mb: 65536, num_volumes: 10, volumes_gb: 500}
    user_quota_usage: {num_vcpus: 10}
```

Usage:
    loader = CatalogLoader(strict_mode=True)
    catalog = loader.parse_file(Path("catalog.yml"))
    report = lint_catalog(catalog)
    if report.has_errors():
        console.print(report.format_report())
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import ValidationError
from rich.console import Console

from quickcluster_wizard.conditions import iter_malformed, referenced_variables
from quickcluster_wizard.constants import RESERVED_KEYS
from quickcluster_wizard.errors import CatalogError
from quickcluster_wizard.schemas.product import Product
from quickcluster_wizard.schemas.region import Region
from quickcluster_wizard.usage import unresolved_node_counts

console = Console(stderr=True)

__all__ = [
    "Catalog",
    "CatalogLoader",
    "CatalogIssue",
    "CatalogReport",
    "lint_catalog",
]


@dataclass
class Catalog:
    """Products and regions keyed by id."""

    products: dict[int, Product] = field(default_factory=dict)
    regions: dict[int, Region] = field(default_factory=dict)

    def merge(self, other: Catalog) -> Catalog:
        return Catalog(
            products={**self.products, **other.products},
            regions={**self.regions, **other.regions},
        )


class CatalogLoader:
    """Decoder for catalog documents."""

    def __init__(self, strict_mode: bool = False) -> None:
        """Initialize the loader.

        Args:
            strict_mode: If True, raise on the first invalid entry.
                If False, print a warning and skip the entry.
        """
        self.strict_mode = strict_mode

    def parse_file(self, path: Path) -> Catalog:
        """Parse one YAML or JSON catalog file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            CatalogError: If the document is not a catalog mapping.
        """
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            content = self.read_document(path)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise CatalogError(f"Could not read {path}: {e}") from e

        if content is None:
            return Catalog()
        if not isinstance(content, dict):
            raise CatalogError(f"Invalid catalog structure in {path}")
        return self.parse_content(content, source=str(path))

    def parse_directory(self, directory: Path) -> Catalog:
        """Parse every catalog file under ``directory`` into one catalog."""
        if not directory.is_dir():
            raise CatalogError(f"Not a directory: {directory}")

        catalog = Catalog()
        for pattern in ("*.yml", "*.yaml", "*.json"):
            for path in sorted(directory.rglob(pattern)):
                try:
                    catalog = catalog.merge(self.parse_file(path))
                except CatalogError as e:
                    self.handle_error(e, f"Failed to parse {path}")
        return catalog

    def parse_content(self, content: dict[str, Any], source: str = "<memory>") -> Catalog:
        """Decode an already-loaded catalog mapping."""
        catalog = Catalog()

        for raw in _as_list(content.get("products"), "products", source):
            try:
                product = Product.model_validate(raw)
            except ValidationError as e:
                self.handle_error(
                    CatalogError(str(e)), f"Skipping invalid product in {source}"
                )
                continue
            catalog.products[product.id] = product

        for raw in _as_list(content.get("regions"), "regions", source):
            try:
                region = Region.model_validate(raw)
            except ValidationError as e:
                self.handle_error(
                    CatalogError(str(e)), f"Skipping invalid region in {source}"
                )
                continue
            catalog.regions[region.id] = region

        return catalog

    def read_document(self, path: Path) -> Any:
        with open(path, encoding="utf-8") as f:
            if path.suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def handle_error(self, error: Exception, context: str = "") -> None:
        """Re-raise in strict mode, otherwise warn and carry on."""
        if self.strict_mode:
            raise error
        console.print(
            f"[yellow]Warning: {context}: {error}[/yellow]",
            highlight=False,
        )


def _as_list(value: Any, key: str, source: str) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, dict):
        # {id: {...}} mappings keyed by id
        return [{"id": k, **v} if isinstance(v, dict) else v for k, v in value.items()]
    if not isinstance(value, list):
        raise CatalogError(f"'{key}' must be a list in {source}")
    return value


# ============================================================================
# Linting
# ============================================================================


@dataclass
class CatalogIssue:
    """One problem found in a product schema.

    Attributes:
        severity: Errors block requests at runtime; warnings may not.
        product: Name of the product concerned.
        variable: Parameter the issue is attached to.
        issue_type: Kind of issue.
        message: Detailed description.
    """

    severity: Literal["error", "warning"]
    product: str
    variable: str
    issue_type: Literal[
        "malformed_condition",
        "unknown_variable",
        "unresolved_flavor",
        "reserved_variable",
    ]
    message: str


@dataclass
class CatalogReport:
    """Accumulated lint issues."""

    issues: list[CatalogIssue] = field(default_factory=list)

    def add(self, issue: CatalogIssue) -> None:
        self.issues.append(issue)

    def has_errors(self) -> bool:
        return any(issue.severity == "error" for issue in self.issues)

    def has_warnings(self) -> bool:
        return any(issue.severity == "warning" for issue in self.issues)

    def format_report(self) -> str:
        """Rich markup listing errors, then warnings."""
        errors = [i for i in self.issues if i.severity == "error"]
        warnings = [i for i in self.issues if i.severity == "warning"]

        parts = []
        if errors:
            parts.append("\n[bold red]Catalog Errors:[/bold red]\n")
            for issue in errors:
                parts.append(f"[red]✗[/red] {issue.product}.{issue.variable}: {issue.message}")
        if warnings:
            parts.append("\n[bold yellow]Catalog Warnings:[/bold yellow]\n")
            for issue in warnings:
                parts.append(
                    f"[yellow]⚠[/yellow] {issue.product}.{issue.variable}: {issue.message}"
                )
        return "\n".join(parts)


def lint_catalog(catalog: Catalog) -> CatalogReport:
    """Check product schemas for authoring mistakes.

    - conditions containing leaves without an operator
    - conditions reading variables the product does not define
    - node-count parameters whose flavor cannot be resolved
    - parameters shadowing the wizard's reserved keys
    """
    report = CatalogReport()

    for product in catalog.products.values():
        known = product.variables | set(RESERVED_KEYS)

        for param in product.parameters:
            if param.variable in RESERVED_KEYS:
                report.add(
                    CatalogIssue(
                        severity="error",
                        product=product.name,
                        variable=param.variable,
                        issue_type="reserved_variable",
                        message="Variable name is reserved by the wizard",
                    )
                )

            if param.condition is None:
                continue
            tree = param.condition.expression
            for leaf in iter_malformed(tree):
                report.add(
                    CatalogIssue(
                        severity="error",
                        product=product.name,
                        variable=param.variable,
                        issue_type="malformed_condition",
                        message=f"Condition on '{leaf.variable}' has no operator",
                    )
                )
            for name in sorted(referenced_variables(tree) - known):
                report.add(
                    CatalogIssue(
                        severity="warning",
                        product=product.name,
                        variable=param.variable,
                        issue_type="unknown_variable",
                        message=f"Condition references unknown variable '{name}'",
                    )
                )

        for variable in unresolved_node_counts(
            product.parameters, product.flavors, {}, product.slug
        ):
            report.add(
                CatalogIssue(
                    severity="warning",
                    product=product.name,
                    variable=variable,
                    issue_type="unresolved_flavor",
                    message="No flavor found; these nodes are not counted against quota",
                )
            )

    return report
