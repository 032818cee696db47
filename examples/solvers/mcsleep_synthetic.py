"""Separation of a synthetic multichannel signal with McSleep.

In this example we solve the optimization problem

    min_{x, c}  0.5 * ||y - x - HT(c)||_F^2 + lam1 * ||x||_1
                + lam2 * ||D^2 x||_1 + lam3 * sum_b ||c_b||_*

where ``y`` is the sum of a sparse piecewise constant transient signal
with a smooth trend and a rank 1 oscillatory signal, ``HT`` synthesizes a
signal from overlapping blocks and ``D^2`` is the second order difference.

See the documentation of the `mcsleep` solver for further details.
"""

import numpy as np
import matplotlib.pyplot as plt
import mcsleep


# --- Generate artificial data --- #

fs = 100.0
y, x_true, s_true = mcsleep.datasets.synthetic_eeg(
    m=3, n=2010, fs=fs, njumps=3, rank=1, nbursts=3, noise=0.05, seed=42)

# --- Set up and solve the problem --- #

param = mcsleep.McSleepParams(lam1=0.05, lam2=1.0, lam3=2.0, K=20, O=10,
                              mu=0.5, niter=60, calculate_cost=True)

# Show a progress bar and print the iteration number every 10th iteration
callback = (mcsleep.solvers.CallbackProgressBar(param.niter) &
            mcsleep.solvers.CallbackPrintIteration(step=10))

x, s, cost = mcsleep.mcsleep_decompose(y, param, callback=callback)

print('relative transient error:   {:.3f}'
      ''.format(np.linalg.norm(x - x_true) / np.linalg.norm(x_true)))
print('relative oscillation error: {:.3f}'
      ''.format(np.linalg.norm(s - s_true) / np.linalg.norm(s_true)))

# --- Display results --- #

t = np.arange(y.shape[1]) / fs
fig, axes = plt.subplots(3, 1, sharex=True)
for ax, sig, title in zip(axes, (y, x, s),
                          ('data', 'transient', 'oscillatory')):
    ax.plot(t, sig.T + 4 * np.arange(sig.shape[0]))
    ax.set_title(title)
axes[-1].set_xlabel('time [s]')

plt.figure()
plt.semilogy(cost)
plt.title('cost function')
plt.xlabel('iteration')
plt.show()
