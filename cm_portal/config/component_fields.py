"""
Component Field Configuration - form field names, type table and column maps

The component details form posts camelCase field names; the component
documents use the column names of the portal database tables. Keeping both
vocabularies here keeps the ingestion and versioning code free of literals.
"""

from typing import Dict, FrozenSet, Tuple

# Fields that must be present and non-empty, in reporting order
REQUIRED_FIELDS: Tuple[str, ...] = (
    "action",
    "componentCode",
    "componentDescription",
    "validityFrom",
    "validityTo",
)

# Multipart fields that carry evidence files rather than values
FILE_FIELDS: Tuple[str, ...] = ("packagingEvidence", "evidenceChemicalRecycled")

# Blob category tag per file field; anything not listed uses DEFAULT_FILE_CATEGORY
FILE_CATEGORY_TAGS: Dict[str, str] = {
    "packagingEvidence": "packagingType",
}
DEFAULT_FILE_CATEGORY = "evidence"

# Categorical lookups are stored as text, not ids
CATEGORICAL_FIELDS: FrozenSet[str] = frozenset({
    "componentType",
    "componentUnitOfMeasure",
    "componentBaseUnitOfMeasure",
    "componentPackagingType",
    "componentWeightUnitOfMeasure",
    "componentPackagingLevel",
    "packagingLevel",
})

NUMERIC_FIELDS: FrozenSet[str] = frozenset({
    "componentQuantity",
    "componentBaseQuantity",
    "componentUnitWeight",
    "wW",
    "percentPostConsumer",
    "percentPostIndustrial",
    "percentChemical",
    "percentBioSourced",
})

DATE_FIELDS: FrozenSet[str] = frozenset({"validityFrom", "validityTo"})

# Form field -> component column, shared by UPDATE and REPLACE
COMPONENT_COLUMN_MAP: Dict[str, str] = {
    "componentType": "material_type_id",
    "componentCode": "component_code",
    "componentDescription": "component_description",
    "componentCategory": "component_material_group",
    "componentQuantity": "component_quantity",
    "componentUnitOfMeasure": "component_uom_id",
    "componentBaseQuantity": "component_base_quantity",
    "componentBaseUnitOfMeasure": "component_base_uom_id",
    "wW": "percent_w_w",
    "componentPackagingType": "component_packaging_type_id",
    "componentPackagingMaterial": "component_packaging_material",
    "componentUnitWeight": "component_unit_weight",
    "componentWeightUnitOfMeasure": "weight_unit_measure_id",
    "percentPostConsumer": "percent_mechanical_pcr_content",
    "percentPostIndustrial": "percent_mechanical_pir_content",
    "percentChemical": "percent_chemical_recycled_content",
    "percentBioSourced": "percent_bio_sourced",
    "materialStructure": "material_structure_multimaterials",
    "packagingColour": "component_packaging_color_opacity",
    "packagingLevel": "component_packaging_level_id",
    "componentDimensions": "component_dimensions",
    "validityFrom": "componentvaliditydatefrom",
    "validityTo": "componentvaliditydateto",
    "chPack": "helper_column",
    "kpisEvidenceMapping": "evidence",
}

# REPLACE also writes the evidence reference into both evidence columns
REPLACE_EVIDENCE_COLUMNS: Tuple[str, ...] = (
    "packaging_specification_evidence",
    "evidence_of_recycled_or_bio_source",
)

# Identity and workflow columns a new version inherits from the one it supersedes
CARRIED_FORWARD_COLUMNS: Tuple[str, ...] = (
    "sku_code",
    "cm_code",
    "formulation_reference",
    "components_reference",
    "category_entry_id",
    "data_verification_entry_id",
    "user_id",
    "signed_off_by",
    "signed_off_date",
    "mandatory_fields_completion_status",
    "evidence_provided",
    "document_status",
    "year",
    "periods",
    "period_id",
    "component_unit_weight_id",
)

# Component columns copied into every audit snapshot
AUDIT_SNAPSHOT_COLUMNS: Tuple[str, ...] = (
    "sku_code",
    "component_code",
    "component_description",
    "component_quantity",
    "component_base_quantity",
    "component_unit_weight",
    "percent_w_w",
    "percent_mechanical_pcr_content",
    "percent_mechanical_pir_content",
    "percent_chemical_recycled_content",
    "percent_bio_sourced",
    "componentvaliditydatefrom",
    "componentvaliditydateto",
    "is_active",
    "year",
    "periods",
)
