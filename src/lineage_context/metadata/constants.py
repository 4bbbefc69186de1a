"""Type, relationship and context category names of the metadata graph."""

from __future__ import annotations

from enum import Enum

# Entity types
TABULAR_COLUMN = "TabularColumn"
RELATIONAL_COLUMN = "RelationalColumn"
DATA_FILE = "DataFile"
FILE_FOLDER = "FileFolder"
DATABASE = "Database"
COMPLEX_SCHEMA_TYPE = "ComplexSchemaType"

# Relationship types
ATTRIBUTE_FOR_SCHEMA = "AttributeForSchema"
NESTED_SCHEMA_ATTRIBUTE = "NestedSchemaAttribute"
ASSET_SCHEMA_TYPE = "AssetSchemaType"
DATA_CONTENT_FOR_DATA_SET = "DataContentForDataSet"
NESTED_FILE = "NestedFile"
FOLDER_HIERARCHY = "FolderHierarchy"
CONNECTION_TO_ASSET = "ConnectionToAsset"
CONNECTION_ENDPOINT = "ConnectionEndpoint"
LINEAGE_MAPPING = "LineageMapping"

# Classifications
ASSET_ZONE_MEMBERSHIP = "AssetZoneMembership"
ZONE_MEMBERSHIP_PROPERTY = "zoneMembership"
CLASSIFICATION_EDGE = "Classification"

QUALIFIED_NAME = "qualifiedName"


class ContextCategory(str, Enum):
    """Key of a context set handed to lineage publication."""

    COLUMN_CONTEXT = "column-context"
    ASSET_CONTEXT = "asset-context"
