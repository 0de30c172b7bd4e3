import io_slits
import scan_source
from config import default_simulation_config
from logging_config import setup_logging
from near_field import scene_from_config
from parameters import SimulationMode, default_wave_params
from plotting import plot_field_frame, plot_intensity_profile
from simulation import example_double_slit, example_double_slit_frame, example_single_slit

if __name__ == '__main__':
    cfg = default_simulation_config()
    setup_logging(cfg)
    print('Executing main')
    x_single, I_single = example_single_slit()
    x, I_double = example_double_slit()
    plot_intensity_profile(x_single, I_single, title="Single slit")
    plot_intensity_profile(x, I_double, title="Double slit")

    scene = scene_from_config(cfg)
    params = default_wave_params(SimulationMode.DOUBLE)
    frame = example_double_slit_frame()
    plot_field_frame(
        frame.xs, frame.ys, frame.field,
        slit_plane_x=scene.slit_plane_x,
        primary_source=scene.primary_source_px(params),
        title="Double slit near field",
    )
    # io_slits.save_run_bundle("./runs", "double", x, I_double, metadata={"params": params, "mode": SimulationMode.DOUBLE}, overwrite=True)
    # scan_source.scan_double_slit_source()
    print('Executed successfully')
