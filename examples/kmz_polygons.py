"""
KMZ example: union the polygons of a KMZ archive and report their area.

This example demonstrates:
- Extracting doc.kml from a KMZ archive
- Inspecting geometry types across all KML folders
- Merging polygons into one multipolygon, then one per folder
"""
import logging

from blog_posts import kmz_post


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    kmz_file = "data/kmz/protected_areas.kmz"
    workdir = "data/kmz"

    # Everything merged into a single multipolygon
    result = kmz_post.run(kmz_file, workdir=workdir, output_path="output/protected_areas.png")

    print(f"KML document: {result['kml_file']}")
    print(f"Features: {result['n_features']}  types: {result['geometry_types']}")
    print(f"Polygon parts: {result['n_parts']}")
    print(f"Total area: {result['total_area_km2']:,.2f} km²")

    # One multipolygon per KML folder
    by_folder = kmz_post.run(kmz_file, workdir=workdir, group_by="layer",
                             output_path="output/protected_areas_by_folder.png")
    for _, row in by_folder["polygons"].iterrows():
        print(f"  {row['layer']}: {row['area_km2']:,.2f} km²")


if __name__ == "__main__":
    main()
