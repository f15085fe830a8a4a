import numpy as np
import matplotlib.pyplot as plt
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.collections import LineCollection
from matplotlib.figure import Figure

DPI = 100

######################################################################
# draw segments (n-by-2-by-2, pixel coordinates, y down) as black
# lines on a transparent width-by-height canvas; returns the
# height-by-width-by-4 RGBA image as uint8

def rasterize(segments, width, height, stroke_width=1.0):

    assert len(segments.shape) == 3 and segments.shape[1:] == (2, 2)
    assert width > 0 and height > 0

    # the extra half pixel keeps int(inches * dpi) from rounding down
    fig = Figure(figsize=((width + 0.5) / DPI, (height + 0.5) / DPI),
                 dpi=DPI)
    fig.patch.set_alpha(0.)

    canvas = FigureCanvasAgg(fig)

    ax = fig.add_axes([0., 0., 1., 1.])
    ax.set_axis_off()
    ax.patch.set_alpha(0.)

    # linewidth is in points, 72 to the inch
    lc = LineCollection(segments, colors='k',
                        linewidths=stroke_width * 72. / DPI)
    ax.add_collection(lc)

    fig_w, fig_h = fig.get_size_inches() * DPI
    ax.set_xlim(0, fig_w)
    ax.set_ylim(fig_h, 0)

    canvas.draw()

    image = np.asarray(canvas.buffer_rgba())

    return image[:height, :width].copy()

######################################################################
# cut a bounding box out of a larger image, clamped to the image

def crop(image, bbox):

    h, w = image.shape[:2]

    x0 = min(max(bbox.min_x, 0), w)
    x1 = min(max(bbox.max_x, x0), w)
    y0 = min(max(bbox.min_y, 0), h)
    y1 = min(max(bbox.max_y, y0), h)

    return image[y0:y1, x0:x1]

def save_image(image, image_filename='segment_plot.png'):
    plt.imsave(image_filename, image)
    print('wrote', image_filename)

def save_segments(segments, filename='segments.txt'):
    np.savetxt(filename, segments.reshape(-1, 4))
    print('wrote', filename)

def load_segments(filename='segments.txt'):
    return np.genfromtxt(filename).reshape(-1, 2, 2)

######################################################################
# render the result of turtle_graphics.walk and save it as a PNG.
#
# With canvas_size=None the segments are assumed to have been traced
# to fit their bounding box exactly. Otherwise they are drawn onto a
# (width, height) canvas and the bounding box is cropped out.

def plot_segments(result, stroke_width=1.0, canvas_size=None,
                  image_filename='segment_plot.png'):

    bbox = result.bounding_box

    if canvas_size is None:
        image = rasterize(result.segments, max(bbox.width, 1),
                          max(bbox.height, 1), stroke_width)
    else:
        image = crop(rasterize(result.segments, canvas_size[0],
                               canvas_size[1], stroke_width), bbox)

    if image.size == 0:
        print('nothing inside the canvas, skipping output!')
        return None

    save_image(image, image_filename)

    return image


if __name__ == '__main__':

    from turtle_graphics import BoundingBox, WalkResult

    segments = load_segments('segments.txt')

    points = segments.reshape(-1, 2)
    bbox = BoundingBox.from_point(points[0])
    for point in points[1:]:
        bbox = bbox.add_point(point)

    dx, dy = -bbox.min_x, -bbox.min_y
    segments = segments + np.array([dx, dy])

    plot_segments(WalkResult(segments, bbox.translated(dx, dy).padded(1),
                             (0., 0.)))
