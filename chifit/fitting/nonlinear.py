"""
Levenberg-Marquardt fit of a model that is nonlinear in its coefficients.

The fit is driven by the caller, one step at a time::

    fitter = LevenbergMarquardt(x, y, sigma, gaussian_model, free)
    state = fitter.init(coef)
    while not converged:
        chi2 = fitter.step(state, coef)
    covar, curvature = fitter.finalize(state)

``state`` carries the iteration (trial coefficients, best chi squared,
damping factor and the current curvature matrix) between calls, and ``coef``
is updated in place whenever a step is accepted. :meth:`LevenbergMarquardt.fit`
runs this loop with a simple convergence criterion, and :func:`nonlin_fit`
offers the classic calling convention in which the damping factor doubles as
a control signal.
"""

from dataclasses import dataclass, field

import numpy as np

from ..errors import FitError, NoFreeParametersWarning, warn
from ..linalg import expand_covariance, gauss_jordan
from .curvature import evaluate_curvature
from .dataset import check_coefficients, check_dataset, check_mask
from utils.logger import log_debug, log_info, log_warning


INITIAL_LAMBDA = 0.001
LAMBDA_FACTOR = 10.0
# Steps are so damped beyond this that no further progress is possible
LAMBDA_MAX = 1e10
# Chi squared below this counts as an exact fit
CHI2_FLOOR = 1e-300


@dataclass
class FitState:
    """
    Iteration state of a Levenberg-Marquardt fit.

    Attributes
    ----------
    trial : ndarray
        Trial coefficients of the last step (length N)
    chi2 : float
        Best (smallest) chi squared so far
    lam : float
        Damping factor; 0 once the fit is finalized
    nfit : int
        Number of free coefficients
    free : ndarray of bool
        Free-parameter mask (length N)
    alpha : ndarray
        Curvature matrix at the accepted coefficients (nfit x nfit)
    beta : ndarray
        Chi-squared gradient vector at the accepted coefficients (nfit)
    finished : bool
        True after finalize()
    """
    trial: np.ndarray
    chi2: float
    lam: float
    nfit: int
    free: np.ndarray
    alpha: np.ndarray
    beta: np.ndarray
    finished: bool = False


@dataclass
class LMResult:
    """Outcome of :meth:`LevenbergMarquardt.fit`."""
    coef: np.ndarray
    chi_squared: float
    covar: np.ndarray
    curvature: np.ndarray
    iterations: int
    accepted: int
    converged: bool
    lambdas: list = field(default_factory=list)
    chi2_history: list = field(default_factory=list)


class LevenbergMarquardt:
    """
    Levenberg-Marquardt minimisation of chi squared for one data set.

    Parameters
    ----------
    x : array_like
        X data points
    y : array_like
        Y data points
    sigma : array_like
        Standard deviations of the y values
    model : callable
        ``model(x, coef)`` returning the model value and the partial
        derivatives dy/dcoef_i at x
    free : array_like of bool, optional
        Fit coefficient i if free[i] is true, keep it fixed otherwise.
        Default: fit all coefficients.

    Notes
    -----
    The object holds only the data and model; all iteration state lives in
    the :class:`FitState` returned by :meth:`init`, so independent fits need
    independent states and coefficient arrays.

    See Numerical Recipes, Sect. 15.5 (mrqmin).
    """

    def __init__(self, x, y, sigma, model, free=None):
        self.x, self.y, self.sigma = check_dataset(x, y, sigma)
        self.model = model
        self.free = free

    def _evaluate(self, coef, free):
        return evaluate_curvature(self.x, self.y, self.sigma, coef, free, self.model)

    @staticmethod
    def _check_state(state, coef=None):
        if state.finished:
            raise FitError("The fit has been finalized; start a new one with init()")
        if coef is not None and coef.shape != state.trial.shape:
            raise FitError(f"Coefficient vector has shape {coef.shape}, expected {state.trial.shape}")

    def init(self, coef):
        """
        Start a fit at the coefficients ``coef``.

        Parameters
        ----------
        coef : ndarray
            Initial coefficients (float array, updated in place by step())

        Returns
        -------
        FitState
            New iteration state with lambda = 0.001
        """
        coef = check_coefficients(coef)
        free = check_mask(self.free, coef.size)
        nfit = int(np.count_nonzero(free))
        if nfit == 0:
            warn("LevenbergMarquardt.init(): no parameters to be fit for", NoFreeParametersWarning)

        alpha, beta, chi2 = self._evaluate(coef, free)
        state = FitState(trial=coef.copy(), chi2=chi2, lam=INITIAL_LAMBDA, nfit=nfit,
                         free=free, alpha=alpha, beta=beta)
        log_debug(f"LM init: {nfit}/{coef.size} free coefficients, chi2 = {chi2:.6g}")
        return state

    def step(self, state, coef):
        """
        Take one damped Gauss-Newton step.

        If the trial coefficients lower chi squared they are accepted: ``coef``
        is updated in place and lambda is divided by 10. Otherwise ``coef`` is
        left unchanged and lambda is multiplied by 10.

        Parameters
        ----------
        state : FitState
            State returned by init(), updated in place
        coef : ndarray
            Current coefficients, updated in place on acceptance

        Returns
        -------
        float
            Chi squared of the (possibly unchanged) current coefficients
        """
        self._check_state(state, coef)
        if not state.lam > 0:
            raise FitError(f"Damping factor must be positive to iterate, got {state.lam}")

        # Augment the diagonal of the curvature matrix
        damped = state.alpha.copy()
        damped[np.diag_indices(state.nfit)] *= 1.0 + state.lam
        delta = state.beta.copy()
        gauss_jordan(damped, delta)

        trial = coef.copy()
        trial[state.free] += delta
        state.trial = trial

        alpha, beta, chi2 = self._evaluate(trial, state.free)

        if chi2 < state.chi2:
            state.lam /= LAMBDA_FACTOR
            state.chi2 = chi2
            state.alpha = alpha
            state.beta = beta
            coef[:] = trial
            log_debug(f"LM step accepted: chi2 = {chi2:.6g}, lambda = {state.lam:.3g}")
        else:
            state.lam *= LAMBDA_FACTOR
            log_debug(f"LM step rejected: chi2 = {chi2:.6g} >= {state.chi2:.6g}, lambda = {state.lam:.3g}")

        return state.chi2

    def finalize(self, state, nmat=None):
        """
        Finish the fit and return the covariance and curvature matrices.

        Parameters
        ----------
        state : FitState
            State of the fit; it cannot be stepped afterwards
        nmat : int, optional
            Size of the returned matrices (>= N), default N

        Returns
        -------
        covar : ndarray
            Variance-covariance matrix, the inverse of the curvature matrix
        curvature : ndarray
            Curvature matrix at the best coefficients

        Both matrices are in full coefficient order with zero rows and
        columns for fixed coefficients.
        """
        self._check_state(state)
        ncoef = state.trial.size
        if nmat is None:
            nmat = ncoef
        if nmat < ncoef:
            raise ValueError(f"nmat = {nmat} is smaller than the number of coefficients ({ncoef})")

        nfit = state.nfit
        covar = np.zeros((nmat, nmat))
        covar[:nfit, :nfit] = state.alpha
        gauss_jordan(covar, n=nfit)
        expand_covariance(covar, state.free, nfit)

        curvature = np.zeros((nmat, nmat))
        curvature[:nfit, :nfit] = state.alpha
        expand_covariance(curvature, state.free, nfit)

        state.lam = 0.0
        state.finished = True
        return covar, curvature

    def fit(self, coef, max_iter=200, tol=1e-3, n_converged=4):
        """
        Iterate until chi squared stops improving, then finalize.

        The fit is considered converged after ``n_converged`` accepted steps
        that lowered chi squared by less than ``tol`` (absolute) or
        ``tol * chi2`` (relative), when chi squared reaches zero, or when
        lambda grows beyond 1e10 (no step improves the fit any more).

        Parameters
        ----------
        coef : ndarray
            Initial coefficients, updated in place to the best fit
        max_iter : int, optional
            Maximum number of steps, default 200
        tol : float, optional
            Chi-squared improvement regarded as negligible, default 1e-3
        n_converged : int, optional
            Number of negligible improvements needed, default 4

        Returns
        -------
        LMResult
        """
        state = self.init(coef)
        lambdas = [state.lam]
        history = [state.chi2]
        accepted = 0
        n_small = 0
        converged = False
        iteration = 0

        while iteration < max_iter:
            if state.chi2 < CHI2_FLOOR or state.nfit == 0:
                converged = True
                break

            iteration += 1
            previous = state.chi2
            chi2 = self.step(state, coef)
            lambdas.append(state.lam)
            history.append(chi2)

            if chi2 < previous:
                accepted += 1
                decrease = previous - chi2
                if decrease < tol or decrease < tol * chi2:
                    n_small += 1
                if n_small >= n_converged:
                    converged = True
                    break
            elif state.lam > LAMBDA_MAX:
                converged = True
                break

        if converged:
            log_info(f"LM fit converged after {iteration} steps ({accepted} accepted), chi2 = {state.chi2:.6g}")
        else:
            log_warning(f"LM fit did not converge in {max_iter} steps, chi2 = {state.chi2:.6g}")

        covar, curvature = self.finalize(state)
        return LMResult(coef=coef.copy(), chi_squared=state.chi2, covar=covar, curvature=curvature,
                        iterations=iteration, accepted=accepted, converged=converged,
                        lambdas=lambdas, chi2_history=history)


def nonlin_fit(x, y, sigma, coef, free, model, lam, state=None):
    """
    One Levenberg-Marquardt call with lambda as control signal.

    Parameters
    ----------
    x, y, sigma : array_like
        Data points and the standard deviations of y
    coef : ndarray
        Coefficients of the model, updated in place after each call
    free : array_like of bool
        Fit coefficient i if free[i] is true, keep it fixed otherwise
    model : callable
        ``model(x, coef)`` returning ``(y, dyda)``
    lam : float
        Set < 0 on the first call to initialise. Lambda decreases 10x when chi
        squared becomes smaller and increases 10x otherwise. Set to 0 on the
        last call to obtain the covariance and curvature matrices.
    state : FitState, optional
        State returned by the previous call; required unless lam < 0

    Returns
    -------
    chi2 : float
        Chi squared of the current coefficients
    lam : float
        Updated damping factor
    state : FitState
        State to pass to the next call
    covar, curvature : ndarray or None
        Variance-covariance and curvature matrices; only set on the last call
        (lam == 0)
    """
    fitter = LevenbergMarquardt(x, y, sigma, model, free)

    if lam < 0:
        state = fitter.init(coef)
    elif state is None:
        raise FitError("No fit state given; call nonlin_fit() with lam < 0 first")
    else:
        state.lam = lam

    if state.lam == 0:
        covar, curvature = fitter.finalize(state)
        return state.chi2, 0.0, state, covar, curvature

    chi2 = fitter.step(state, coef)
    return chi2, state.lam, state, None, None
