import time
import numpy as np


def franke(x, y):
    """
    Franke's test function on the unit square
    """
    term1 = 0.75 * np.exp(-((9 * x - 2) ** 2) / 4 - ((9 * y - 2) ** 2) / 4)
    term2 = 0.75 * np.exp(-((9 * x + 1) ** 2) / 49 - (9 * y + 1) / 10)
    term3 = 0.5 * np.exp(-((9 * x - 7) ** 2) / 4 - ((9 * y - 3) ** 2) / 4)
    term4 = 0.2 * np.exp(-((9 * x - 4) ** 2) - (9 * y - 7) ** 2)
    return term1 + term2 + term3 - term4


if __name__ == "__main__":

    import logging

    import jax
    import mls_interp

    jax.config.update('jax_default_device', jax.devices('cpu')[0])  # Change to 'gpu' or 'tpu' for accelerators
    logging.basicConfig(level=logging.INFO)

    # scattered samples
    rng = np.random.default_rng(0)
    num_samples = 400
    x = rng.random(num_samples)
    y = rng.random(num_samples)
    points = mls_interp.point_set(x, y)
    print(points)

    # evaluation grid
    num_points = 31
    g = np.linspace(0, 1, num=num_points)
    X, Y = np.meshgrid(g, g, indexing="xy")
    queries = np.stack([X.flatten(), Y.flatten()], axis=1)
    exact = franke(queries[:, 0], queries[:, 1])

    for name, support in [("quartic", 0.15), ("cubic_spline", 0.08), ("gaussian", 0.05)]:
        kernel = mls_interp.make_kernel(name, support=support)
        state = mls_interp.build(points, franke(x, y), kernel, mls_interp.MLSConfig(degree=2))

        start = time.time()
        result = mls_interp.evaluate_many(state, queries, verbose=True)
        elapsed = time.time() - start

        ok = np.asarray(result.ok)
        err = np.abs(np.asarray(result.values)[ok] - exact[ok])
        print(
            "{:>12s}: max error {:.3e}, mean error {:.3e}, {} failed queries, took {:3.3f} sec".format(
                name, err.max(), err.mean(), result.n_failed, elapsed
            )
        )
