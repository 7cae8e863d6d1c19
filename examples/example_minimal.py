
from pointregrid import ObservationPoint, RegridConfig, regrid_points

source = [
    ObservationPoint.from_lonlat(87.25, 46.25, 2020, [1.0, 2.0]),
    ObservationPoint.from_lonlat(86.25, 46.25, 2020, [3.0, 4.0]),
    ObservationPoint.from_lonlat(87.75, 46.10, 2020, [2.0, 3.0]),
]
target = [ObservationPoint.from_lonlat(88.0, 46.0, 2020)]

cfg = RegridConfig(method="idw", radius=100.0, power=2.0, min_points=2, max_points=4,
                   write_mappings=True)
result = regrid_points(source, target, cfg)
print(result.to_frame(["Lon", "Lat", "Year", "tmin", "tmax"]))
print(result.idw_frame())

try:
    result.to_frame().to_parquet("regridded.parquet", index=False)
    print("Saved to regridded.parquet")
except ImportError as e:
    print(f"Parquet not available ({e}); saving CSV instead.")
    result.to_frame().to_csv("regridded.csv", index=False)
