"""
Static CM dataset and the sample SKU/component rows shown on the detail view.

The browse endpoints read only from these tuples; nothing writes to them.
"""
from typing import Tuple

from ..models.browse_models import CMRecord, ComponentSummary, SKUSummary


CM_DATA: Tuple[CMRecord, ...] = (
    CMRecord(cm_code="CM001", cm_description="Alpha Packaging Ltd", signoff_status="Signed"),
    CMRecord(cm_code="CM002", cm_description="Beta Bottling Co", signoff_status="Pending"),
    CMRecord(cm_code="CM003", cm_description="Gamma Plastics", signoff_status="Rejected"),
    CMRecord(cm_code="CM004", cm_description="Delta Glassworks", signoff_status="Signed"),
    CMRecord(cm_code="CM005", cm_description="Epsilon Labels", signoff_status="Pending"),
    CMRecord(cm_code="CM006", cm_description="Zeta Cartons", signoff_status="Signed"),
    CMRecord(cm_code="CM007", cm_description="Eta Closures", signoff_status="Rejected"),
    CMRecord(cm_code="CM008", cm_description="Theta Films", signoff_status="Signed"),
    CMRecord(cm_code="CM009", cm_description="Iota Tubes", signoff_status="Pending"),
    CMRecord(cm_code="CM010", cm_description="Kappa Cans", signoff_status="Signed"),
    CMRecord(cm_code="CM011", cm_description="Lambda Pouches", signoff_status="Signed"),
    CMRecord(cm_code="CM012", cm_description="Mu Corrugated", signoff_status="Pending"),
)

SAMPLE_SKUS: Tuple[SKUSummary, ...] = (
    SKUSummary(sku_code="SKU001", sku_name="SKU Name 1", sku_description="Description 1", purchased_quantity=100, status="Active"),
    SKUSummary(sku_code="SKU002", sku_name="SKU Name 2", sku_description="Description 2", purchased_quantity=50, status="Inactive"),
    SKUSummary(sku_code="SKU003", sku_name="SKU Name 3", sku_description="Description 3", purchased_quantity=200, status="Active"),
)

SAMPLE_COMPONENTS: Tuple[ComponentSummary, ...] = (
    ComponentSummary(
        material_type="Plastic",
        component_reference="CR-001",
        component_code="C-1001",
        component_description="Bottle Cap",
        valid_from="2023-01-01",
        valid_to="2024-01-01",
        material_group="MG-01",
        qty=10,
        uom="PCS",
        base_uom="PCS",
        packaging_type="Primary",
        weight_type="Net",
        unit_measure="g",
        pct_post_consumer=20,
        pct_post_industrial=10,
        pct_chemical=5,
        pct_bio_sourced=15,
        structure="Single",
        color_opacity="Opaque",
        packaging_level="Level 1",
        dimensions="5x5x2",
        spec_evidence="Yes",
        recycled_evidence="Yes",
        proof_file="proof1.pdf",
        last_updated="2024-06-18",
    ),
    ComponentSummary(
        material_type="Glass",
        component_reference="CR-002",
        component_code="C-1002",
        component_description="Bottle Body",
        valid_from="2023-02-01",
        valid_to="2024-02-01",
        material_group="MG-02",
        qty=1,
        uom="PCS",
        base_uom="PCS",
        packaging_type="Primary",
        weight_type="Gross",
        unit_measure="g",
        pct_post_consumer=30,
        pct_post_industrial=5,
        pct_chemical=0,
        pct_bio_sourced=0,
        structure="Double",
        color_opacity="Clear",
        packaging_level="Level 2",
        dimensions="20x5x5",
        spec_evidence="No",
        recycled_evidence="No",
        proof_file="proof2.pdf",
        last_updated="2024-06-17",
    ),
)
