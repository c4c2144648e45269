from alt_checker.services.scan_service import ScanService


def get_scan_service() -> ScanService:
    return ScanService()
