"""
Backer list → Shopify discount code generator.

This package provides the building blocks for:
- Reading backer CSVs (name + pledge amount)
- Cleaning names through operator-defined transform pipelines
- Creating one single-use Shopify discount code per backer
- Exporting the outcome as CSV

Public API:
- io.parse_csv, io.read_rows
- transform.transform_name, transform.compile_transform
- codes.CodeFactory
- shopify_client.ShopifyConfig, shopify_client.build_session, shopify_client.AdminGraphQL
- generator.generate_discount_codes
- export.generate_csv_with_codes, export.generate_summary_csv,
  export.generate_successful_codes_csv, export.export_report, export.export_filename
"""

from . import errors, models, io, normalize, transform, codes, shopify_client, generator, export  # re-export modules

__all__ = [
    "errors",
    "models",
    "io",
    "normalize",
    "transform",
    "codes",
    "shopify_client",
    "generator",
    "export",
]
