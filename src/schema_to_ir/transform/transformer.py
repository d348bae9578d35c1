"""Format-agnostic half of every conversion.

The transformer drives a :class:`FormatAdapter` through the pipeline:

1. Enumerate operations (adapter)
2. Bucket them by resource using the operation classifier (shared)
3. Extract input fields, blocks and outputs (adapter locates and lists
   schema members, the transformer shapes them into IR)
4. Assemble resources, data sources and the service (shared)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from schema_to_ir.config import ConverterSettings, get_settings
from schema_to_ir.ir.fields import BlockDefinition, FieldDefinition, NestingMode
from schema_to_ir.ir.resources import (
    DataSourceDefinition,
    OperationMapping,
    Operations,
    ResourceDefinition,
)
from schema_to_ir.ir.service import Provider, ServiceDefinition
from schema_to_ir.ir.types import ListType, ObjectType, is_container
from schema_to_ir.transform.classifier import (
    Classification,
    CrudOperation,
    classify_operation,
)
from schema_to_ir.transform.naming import resource_key, to_snake_case
from schema_to_ir.transform.pipeline import (
    ConversionResult,
    FormatAdapter,
    OperationRef,
    SchemaMember,
)
from schema_to_ir.transform.resolver import ResolutionContext, node_key
from schema_to_ir.validation.errors import ConversionReport, ErrorCodes
from schema_to_ir.validation.validator import IRValidator

logger = logging.getLogger(__name__)

# Objects with at least this many members become single blocks.
COMPLEX_OBJECT_MEMBERS = 3

ID_FIELD_CANDIDATES = ("id", "name")


@dataclass(frozen=True)
class BoundOperation:
    """An operation that has been assigned to a resource bucket."""

    operation: OperationRef
    classification: Classification

    @property
    def sdk_operation(self) -> str:
        """Normalized operation identifier."""
        return to_snake_case(self.operation.identifier)


@dataclass
class ResourceBucket:
    """Operations tentatively associated with one resource name."""

    name: str
    operations: dict[CrudOperation, list[BoundOperation]] = field(default_factory=dict)

    def add(self, bound: BoundOperation) -> BoundOperation | None:
        """Add an operation; return whichever operation ended up supplementary.

        The first operation of a category is its primary binding. A read that
        fetches one instance takes precedence over an earlier listing read.
        """
        category = bound.classification.category
        if category is None:
            raise ValueError(f"Cannot bucket unclassified operation '{bound.sdk_operation}'")
        bound_ops = self.operations.setdefault(category, [])
        if not bound_ops:
            bound_ops.append(bound)
            return None
        primary = bound_ops[0]
        if (
            category is CrudOperation.READ
            and primary.classification.is_list
            and not bound.classification.is_list
        ):
            bound_ops.insert(0, bound)
            return primary
        bound_ops.append(bound)
        return bound

    def primary(self, category: CrudOperation) -> BoundOperation | None:
        """First operation bound to a category."""
        bound_ops = self.operations.get(category)
        return bound_ops[0] if bound_ops else None

    def mapping(self, category: CrudOperation) -> OperationMapping | None:
        """Mapping with the first operation as primary and the rest supplementary."""
        bound_ops = self.operations.get(category)
        if not bound_ops:
            return None
        return OperationMapping(
            sdk_operation=bound_ops[0].sdk_operation,
            additional_operations=tuple(b.sdk_operation for b in bound_ops[1:]),
        )

    def list_operation(self) -> BoundOperation | None:
        """First read operation that lists instances."""
        for bound in self.operations.get(CrudOperation.READ, []):
            if bound.classification.is_list:
                return bound
        return None

    @property
    def is_empty(self) -> bool:
        """Check whether no operation was bound."""
        return not any(self.operations.values())


class IRTransformer:
    """Turn the operations a format adapter exposes into a ServiceDefinition.

    Usage:
        transformer = IRTransformer()
        result = transformer.transform(adapter, "s3", "2006-03-01")
    """

    def __init__(self, settings: ConverterSettings | None = None) -> None:
        """Initialize the transformer."""
        self.settings = settings or get_settings()
        self._validator = IRValidator()

    def transform(
        self,
        adapter: FormatAdapter,
        service_name: str,
        version: str,
        provider: Provider | None = None,
    ) -> ConversionResult:
        """Run the shared pipeline over one adapter.

        Args:
        ----
            adapter: Format adapter wrapping an already parsed document.
            service_name: Name given to the resulting service.
            version: Schema/API version recorded on the service.
            provider: Provider override; the adapter's default otherwise.

        Returns:
        -------
            ConversionResult with the service and all recorded issues.

        Raises:
        ------
            InvalidIRError: If the assembled IR breaks an invariant.

        """
        report = ConversionReport()
        buckets = self._bucket_operations(adapter, report)

        resources: list[ResourceDefinition] = []
        data_sources: list[DataSourceDefinition] = []
        for bucket in buckets.values():
            if bucket.is_empty:
                continue
            resource = self._build_resource(adapter, bucket, report)
            if not resource.operations.has_crud:
                logger.debug("Dropping resource %r without operations", resource.name)
                continue
            resources.append(resource)
            read_op = bucket.primary(CrudOperation.READ)
            if self.settings.emit_data_sources and read_op is not None:
                data_sources.append(
                    self._build_data_source(adapter, bucket, read_op, resource, report)
                )

        if not resources:
            report.add_warning(
                ErrorCodes.W001_NO_RESOURCES_FOUND,
                f"No classifiable operations found in {adapter.format_name} document",
                service_name,
            )

        service = ServiceDefinition(
            provider=provider or adapter.provider,
            name=service_name,
            sdk_version=version,
            resources=tuple(resources),
            data_sources=tuple(data_sources),
        )
        report.merge(self._validator.validate_and_raise(service))
        logger.info(
            "Converted %s service %r: %d resource(s), %d warning(s)",
            adapter.format_name,
            service_name,
            len(resources),
            len(report.warnings),
        )
        return ConversionResult(service=service, report=report)

    # -- step 2: bucketing ---------------------------------------------------

    def _bucket_operations(
        self,
        adapter: FormatAdapter,
        report: ConversionReport,
    ) -> dict[str, ResourceBucket]:
        """Classify every operation and group it by resource name."""
        buckets: dict[str, ResourceBucket] = {}

        for operation in adapter.enumerate_operations():
            classification = classify_operation(operation.identifier, operation.verb)
            category = classification.category
            token = operation.resource or classification.resource

            if category is None or not token:
                report.add_info(
                    ErrorCodes.I002_UNCLASSIFIED_OPERATION,
                    f"Operation '{operation.identifier}' has no CRUD category or resource name",
                    operation.identifier,
                )
                continue

            key = resource_key(token)
            bucket = buckets.setdefault(key, ResourceBucket(name=key))
            bound = BoundOperation(operation=operation, classification=classification)
            supplementary = bucket.add(bound)
            if supplementary is not None:
                primary = bucket.operations[category][0]
                report.add_info(
                    ErrorCodes.I001_SUPPLEMENTARY_OPERATION,
                    (
                        f"'{supplementary.sdk_operation}' also classifies as {category.value} for "
                        f"'{key}'; kept as supplementary to '{primary.sdk_operation}'"
                    ),
                    f"{key}.operations.{category.value}",
                )

        return buckets

    # -- step 3: extraction --------------------------------------------------

    def _context(self, report: ConversionReport, path: str) -> ResolutionContext:
        return ResolutionContext(report, self.settings.max_resolution_depth, path)

    def _input_members(
        self,
        adapter: FormatAdapter,
        operation: OperationRef,
        report: ConversionReport,
        path: str,
    ) -> list[SchemaMember]:
        """Parameters followed by body members, first occurrence of a name wins."""
        context = self._context(report, path)
        members = list(adapter.parameters(operation, context))
        node = adapter.input_schema(operation)
        if node is not None:
            members.extend(adapter.members(node, context))
        return _dedupe(members)

    def _output_members(
        self,
        adapter: FormatAdapter,
        operation: OperationRef,
        report: ConversionReport,
        path: str,
    ) -> list[SchemaMember]:
        node = adapter.output_schema(operation)
        if node is None:
            return []
        return _dedupe(adapter.members(node, self._context(report, path)))

    def _build_resource(
        self,
        adapter: FormatAdapter,
        bucket: ResourceBucket,
        report: ConversionReport,
    ) -> ResourceDefinition:
        """Extract fields, blocks and outputs for one bucket."""
        fields: list[FieldDefinition] = []
        blocks: list[BlockDefinition] = []
        outputs: list[FieldDefinition] = []

        input_op = bucket.primary(CrudOperation.CREATE) or bucket.primary(CrudOperation.UPDATE)
        if input_op is not None:
            path = f"{bucket.name}.fields"
            for member in self._input_members(adapter, input_op.operation, report, path):
                if _is_block(member):
                    context = self._context(report, f"{bucket.name}.blocks.{member.name}")
                    blocks.append(self._build_block(adapter, member, context, frozenset()))
                else:
                    fields.append(_to_field(member))

        read_op = bucket.primary(CrudOperation.READ)
        if read_op is not None:
            path = f"{bucket.name}.outputs"
            outputs = [
                _to_field(member, output=True)
                for member in self._output_members(adapter, read_op.operation, report, path)
            ]

        id_field = _identifier_field(fields, outputs)
        read_mapping = bucket.mapping(CrudOperation.READ)
        import_mapping = None
        if read_mapping is not None and id_field is not None:
            import_mapping = OperationMapping(sdk_operation=read_mapping.sdk_operation)

        return ResourceDefinition(
            name=bucket.name,
            description=_description(bucket),
            fields=tuple(fields),
            outputs=tuple(outputs),
            blocks=tuple(blocks),
            id_field=id_field,
            operations=Operations(
                create=bucket.mapping(CrudOperation.CREATE),
                read=read_mapping,
                update=bucket.mapping(CrudOperation.UPDATE),
                delete=bucket.mapping(CrudOperation.DELETE),
                import_=import_mapping,
            ),
        )

    def _build_block(
        self,
        adapter: FormatAdapter,
        member: SchemaMember,
        context: ResolutionContext,
        ancestry: frozenset[str],
    ) -> BlockDefinition:
        """Build a block from an object (or list of objects) member."""
        is_list = isinstance(member.field_type, ListType)
        object_type = member.field_type.item if is_list else member.field_type
        if not isinstance(object_type, ObjectType):
            raise TypeError(f"Member '{member.name}' is not an object and cannot form a block")

        attributes: list[FieldDefinition] = []
        nested_blocks: list[BlockDefinition] = []
        key = member.type_name or (node_key(member.schema) if member.schema is not None else None)

        if member.schema is None:
            attributes = [
                FieldDefinition(name=to_snake_case(name), field_type=member_type)
                for name, member_type in object_type.fields
            ]
        elif key in ancestry or len(ancestry) >= self.settings.max_resolution_depth:
            context.report.add_warning(
                ErrorCodes.W003_RECURSION_LIMIT_EXCEEDED,
                f"Block '{member.name}' nests itself; nested blocks truncated",
                context.path,
                chain=" -> ".join(sorted(ancestry)),
            )
        else:
            inner = ancestry | {key} if key else ancestry
            for nested in _dedupe(adapter.members(member.schema, context)):
                if _is_block(nested):
                    nested_context = context.for_field(nested.name)
                    nested_blocks.append(self._build_block(adapter, nested, nested_context, inner))
                else:
                    attributes.append(_to_field(nested))

        name = to_snake_case(member.name)
        return BlockDefinition(
            name=name,
            description=member.description,
            attributes=tuple(attributes),
            blocks=tuple(nested_blocks),
            nesting_mode=NestingMode.LIST if is_list else NestingMode.SINGLE,
            min_items=0 if is_list else 1,
            max_items=0 if is_list else 1,
            sdk_type_name=member.type_name,
            sdk_accessor_method=name,
        )

    # -- step 4: data sources ------------------------------------------------

    def _build_data_source(
        self,
        adapter: FormatAdapter,
        bucket: ResourceBucket,
        read_op: BoundOperation,
        resource: ResourceDefinition,
        report: ConversionReport,
    ) -> DataSourceDefinition:
        """Derive the read-only variant of a resource."""
        path = f"{bucket.name}.data_source.arguments"
        arguments = [
            _to_field(member)
            for member in self._input_members(adapter, read_op.operation, report, path)
        ]
        list_op = bucket.list_operation()
        return DataSourceDefinition(
            name=resource.name,
            description=resource.description,
            arguments=tuple(arguments),
            outputs=resource.outputs,
            read=resource.operations.read,
            list=OperationMapping(sdk_operation=list_op.sdk_operation) if list_op else None,
        )


def _dedupe(members: list[SchemaMember]) -> list[SchemaMember]:
    seen: set[str] = set()
    unique = []
    for member in members:
        name = to_snake_case(member.name)
        if name in seen:
            continue
        seen.add(name)
        unique.append(member)
    return unique


def _is_block(member: SchemaMember) -> bool:
    """Check whether a member becomes a nested block instead of a field."""
    field_type = member.field_type
    if isinstance(field_type, ListType):
        return isinstance(field_type.item, ObjectType) and bool(field_type.item.fields)
    if isinstance(field_type, ObjectType):
        return len(field_type.fields) >= COMPLEX_OBJECT_MEMBERS or any(
            is_container(member_type) for _, member_type in field_type.fields
        )
    return False


def _to_field(member: SchemaMember, output: bool = False) -> FieldDefinition:
    name = to_snake_case(member.name)
    return FieldDefinition(
        name=name,
        field_type=member.field_type,
        required=member.required,
        sensitive=member.sensitive,
        immutable=member.immutable,
        description=member.description,
        response_accessor=name if output else None,
    )


def _identifier_field(
    fields: list[FieldDefinition],
    outputs: list[FieldDefinition],
) -> str | None:
    """Pick the field identifying an instance."""
    for field_def in fields:
        if field_def.immutable:
            return field_def.name
    names = {f.name for f in fields} | {f.name for f in outputs}
    for candidate in ID_FIELD_CANDIDATES:
        if candidate in names:
            return candidate
    return None


def _description(bucket: ResourceBucket) -> str | None:
    for category in (
        CrudOperation.CREATE,
        CrudOperation.READ,
        CrudOperation.UPDATE,
        CrudOperation.DELETE,
    ):
        bound = bucket.primary(category)
        if bound is not None and bound.operation.description:
            return bound.operation.description
    return None

