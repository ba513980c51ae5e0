# map_build.py
# Extracts named places around the home coordinate from an OSM extract into
# the kind,name,lat,lon CSV that mappath's PlaceFinder.from_csv() reads.
#
# Needs: pip install -e .[build]
#   python map_build.py jakarta.osm places.csv --radius 5000

import argparse

import osmnx as ox
import pandas as pd
from shapely.geometry import Point

from mappath.map_config import HOME_LAT, HOME_LON, HOME_REGION_SPAN_M

TAGS = {
    "amenity": True,
    "shop": True,
    "tourism": True,
    "leisure": ["park"],
}

KIND_KEYS = ("amenity", "shop", "tourism", "leisure")


def extract_places_csv(osm_path, tags_dict, center_latlon, radius_m, out_csv):
    gdf = ox.features_from_xml(osm_path, tags=tags_dict)
    if gdf.empty:
        print(f"{out_csv}: no features"); return 0

    # Reduce polygons (malls, parks) to their centroid
    gdf = gdf.copy()
    gdf_proj = ox.projection.project_gdf(gdf)
    gdf_proj["geometry"] = gdf_proj.geometry.centroid
    center_ll = Point(center_latlon[1], center_latlon[0])  # lon,lat
    center_proj, _ = ox.projection.project_geometry(center_ll, crs="EPSG:4326", to_crs=gdf_proj.crs)
    dists = gdf_proj.geometry.distance(center_proj)
    gdf_sel = gdf_proj.loc[dists <= radius_m].to_crs(4326)

    if "name" not in gdf_sel.columns:
        print(f"{out_csv}: no named places"); return 0
    gdf_sel = gdf_sel[gdf_sel["name"].notna()]
    if gdf_sel.empty:
        print(f"{out_csv}: no named places"); return 0

    def kind(r):
        for key in KIND_KEYS:
            val = r.get(key)
            if isinstance(val, str) and val:
                return val
        return "other"

    df = pd.DataFrame({
        "kind": [kind(r) for _, r in gdf_sel.iterrows()],
        "name": gdf_sel["name"].values,
        "lat":  gdf_sel.geometry.y.values,
        "lon":  gdf_sel.geometry.x.values,
    })
    df = df.drop_duplicates(subset=["name", "lat", "lon"])
    df.to_csv(out_csv, index=False, encoding="utf-8")
    print(f"Written: {out_csv} ({len(df)} places)")
    return len(df)


def main():
    p = argparse.ArgumentParser(description="Build the places CSV for the home region.")
    p.add_argument("osm_path", help=".osm / .osm.gz extract")
    p.add_argument("out_csv", help="Output CSV path")
    p.add_argument("--lat", type=float, default=HOME_LAT)
    p.add_argument("--lon", type=float, default=HOME_LON)
    p.add_argument("--radius", type=float, default=HOME_REGION_SPAN_M / 2, help="metres")
    args = p.parse_args()
    extract_places_csv(args.osm_path, TAGS, (args.lat, args.lon), args.radius, args.out_csv)


if __name__ == "__main__":
    main()
