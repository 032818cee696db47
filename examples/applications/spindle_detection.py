"""Sleep spindle detection on the McSleep oscillatory component.

A synthetic recording with sigma band bursts is decomposed epoch by epoch,
and spindles are detected in the oscillatory component by thresholding its
band-passed Teager-Kaiser energy.
"""

import numpy as np
import matplotlib.pyplot as plt
import mcsleep


fs = 200.0
y, _, s_true = mcsleep.datasets.synthetic_eeg(
    m=6, n=int(60 * fs), fs=fs, njumps=8, rank=1, freqs=(13.0,), nbursts=4,
    noise=0.1, seed=0)

# Parameters of the original McSleep publication
param = {'lam1': 0.3, 'lam2': 6.5, 'lam3': 36, 'K': 200, 'O': 100,
         'mu': 0.5, 'Nit': 40, 'calculateCost': False}

x, s = mcsleep.applications.epoch_decompose(y, fs, param, epoch_length=30.0)

mask, intervals = mcsleep.applications.detect_spindles(s, fs, threshold=0.05)
for start, stop in intervals:
    print('spindle from {:6.2f} s to {:6.2f} s'.format(start / fs, stop / fs))

# Reference detection on the true oscillatory component
mask_true, _ = mcsleep.applications.detect_spindles(s_true, fs,
                                                    threshold=0.05)

t = np.arange(y.shape[1]) / fs
plt.plot(t, s[0], label='oscillatory component, channel 1')
plt.fill_between(t, -1, 1, where=mask, alpha=0.3, label='detected')
plt.fill_between(t, -1, 1, where=mask_true, alpha=0.2, label='reference')
plt.legend()
plt.xlabel('time [s]')
plt.show()
