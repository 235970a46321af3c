# Processing package initialization
from .pixel_buffer import PixelBuffer, EncodedImage, SUPPORTED_CHANNELS
from .sampling import sample_bilinear, sample_bilinear_grid
from .kernels import Kernel, build_gaussian_kernel
from .dispatch import RowRange, DispatchReport, clamp_thread_count, partition_rows, dispatch_rows
from .adjustments import adjust_brightness
from .convolution import gaussian_blur, sobel_edges
from .geometry import RotationBounds, rotation_bounds, rotate, resize
