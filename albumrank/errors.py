class AlbumRankError(RuntimeError):
    pass


class DataUnavailableError(AlbumRankError):
    pass


class IncompleteCovariatesError(AlbumRankError):
    pass


class RankDeficiencyError(AlbumRankError):
    pass
