from typing import Any, Literal

from pydantic import BaseModel, Field

from v0_mcp.models.request import ComponentType, Framework

Priority = Literal["high", "medium", "low"]


class ComponentMetadata(BaseModel):
    name: str
    description: str = "Generated component"
    dependencies: list[str] = []
    framework: Framework = "react"
    styling: Literal["tailwind", "css-modules", "styled-components"] = "tailwind"
    accessibility: bool = True
    typescript: bool = True


class ComponentResponse(BaseModel):
    code: str
    metadata: ComponentMetadata
    explanation: str | None = None
    content: str = ""


class ParsedComponent(BaseModel):
    code: str
    name: str
    imports: list[str] = []
    usage: str = ""
    integration_steps: list[str] = []
    customization_notes: list[str] = []
    changes_made: list[str] = []
    visual_enhancements: list[str] = []
    breaking_changes: list[str] = []
    migration_guide: list[str] = []


class ComponentNeeded(BaseModel):
    name: str
    type: ComponentType
    visual_purpose: str
    shadcn_dependencies: list[str] = []
    priority: Priority = "medium"


class VisualRelationship(BaseModel):
    component: str
    contained_within: str | None = None
    visually_related_to: list[str] = Field(min_length=1)
    shared_patterns: list[str] | None = None


class ComponentMapping(BaseModel):
    component: str
    shadcn_components: list[str] = Field(min_length=1)
    combinations: list[str] = []


class ShadcnIntegration(BaseModel):
    component_mappings: list[ComponentMapping] = []
    consistency_patterns: list[str] = []


class ParsedAnalysis(BaseModel):
    components_needed: list[ComponentNeeded] = []
    build_order: list[str] = []
    visual_relationships: list[VisualRelationship] = []
    shadcn_integration: ShadcnIntegration = Field(default_factory=ShadcnIntegration)


class StreamingResponse(BaseModel):
    chunk: str
    progress: int = Field(ge=0, le=100)
    complete: bool
    usage_metadata: dict[str, Any] | None = None


# Tool response envelopes


class UIBreakdown(BaseModel):
    components_needed: list[ComponentNeeded]
    build_order: list[str]
    visual_relationships: list[VisualRelationship]


class AnalysisMapping(BaseModel):
    component: str
    shadcn_components: list[str]
    recommended_combinations: list[str]


class AnalysisIntegration(BaseModel):
    component_mappings: list[AnalysisMapping]
    consistency_patterns: list[str]


class AnalysisEnvelope(BaseModel):
    response_type: Literal["ui_analysis"] = "ui_analysis"
    ui_breakdown: UIBreakdown
    shadcn_integration: AnalysisIntegration


class GeneratedComponent(BaseModel):
    name: str
    code: str
    file_path: str = ""
    exports: list[str] = []
    props_interface: dict[str, str] = {}


class IntegrationStep(BaseModel):
    file: str = ""
    action: str = "modify"
    description: str


class ComponentIntegration(BaseModel):
    imports_needed: list[str] = []
    usage_example: str
    integration_steps: list[IntegrationStep] = []


class ComponentDependencies(BaseModel):
    npm_packages: list[str] = []
    internal_components: list[str] = []
    missing_components: list[str] = []


class ComponentNotes(BaseModel):
    customization_hints: list[str] = []
    accessibility_features: list[str] = []
    responsive_breakpoints: list[str] = []


class ComponentEnvelope(BaseModel):
    response_type: Literal["component"] = "component"
    component: GeneratedComponent
    integration: ComponentIntegration
    dependencies: ComponentDependencies
    notes: ComponentNotes


class ImprovedComponent(BaseModel):
    name: str
    improved_code: str
    changes_made: list[str]
    visual_enhancements: list[str] = []


class ImprovementEnvelope(BaseModel):
    response_type: Literal["improvement"] = "improvement"
    component: ImprovedComponent
    breaking_changes: list[str] = []
    migration_guide: list[str] = []


class TemplateVariantSummary(BaseModel):
    name: str
    description: str


class TemplateSummary(BaseModel):
    name: str
    category: str
    description: str
    visual_pattern: str
    shadcn_components: list[str]
    variants: list[TemplateVariantSummary]


class TemplatesEnvelope(BaseModel):
    response_type: Literal["templates"] = "templates"
    category: str
    framework: str
    templates: list[TemplateSummary]
