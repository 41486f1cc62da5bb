from typing import List, Union

from pydantic import BaseModel, ConfigDict


class CMRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    cm_code: str
    cm_description: str
    signoff_status: str


class SKUSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    sku_code: str
    sku_name: str
    sku_description: str
    purchased_quantity: int
    status: str


class ComponentSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    material_type: str
    component_reference: str
    component_code: str
    component_description: str
    valid_from: str
    valid_to: str
    material_group: str
    qty: float
    uom: str
    base_uom: str
    packaging_type: str
    weight_type: str
    unit_measure: str
    pct_post_consumer: float
    pct_post_industrial: float
    pct_chemical: float
    pct_bio_sourced: float
    structure: str
    color_opacity: str
    packaging_level: str
    dimensions: str
    spec_evidence: str
    recycled_evidence: str
    proof_file: str
    last_updated: str


class CMRow(CMRecord):
    status_colour: str


class CMPage(BaseModel):
    records: List[CMRow]
    page: int
    per_page: Union[int, str]
    total: int
    total_pages: int


class CMFilterOptions(BaseModel):
    cm_codes: List[str]
    cm_descriptions: List[str]
    signoff_statuses: List[str]
    per_page_options: List[Union[int, str]]


class CMDetail(BaseModel):
    cm: CMRow
    skus: List[SKUSummary]
    components: List[ComponentSummary]
